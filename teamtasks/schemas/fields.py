#teamtasks/schemas/fields.py
import re
from datetime import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator

from teamtasks.core.clock import as_utc

PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&]).{8,128}$")


def check_password_strength(value: Optional[str]) -> Optional[str]:
    """At least 8 characters with an upper-case letter, a lower-case letter, a digit and one of @$!%*?&."""
    if value is None:
        return value
    if not PASSWORD_PATTERN.match(value):
        raise ValueError(
            "Password must be at least 8 characters long and contain upper-case, "
            "lower-case, digit and special (@$!%*?&) characters"
        )
    return value


UTCDatetime = Annotated[datetime, AfterValidator(as_utc)]
StrongPassword = Annotated[str, AfterValidator(check_password_strength)]
