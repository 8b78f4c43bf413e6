from .user import User
from .auth import RefreshToken
from .team import Team, TeamMember
from .project import Project
from .task import Task
from .comment import Comment
from .attachment import Attachment
