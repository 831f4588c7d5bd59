# SQLModel definitions, imported here so metadata is populated for create_all.
from .base import UUIDMixin, TimestampMixin  # noqa: F401
from .user import User  # noqa: F401
from .password_reset import PasswordResetToken  # noqa: F401
from .workspace import Workspace  # noqa: F401
from .workspace_member import WorkspaceMember  # noqa: F401
from .workspace_invite import WorkspaceInvite  # noqa: F401
from .year import Year  # noqa: F401
from .cycle import Cycle  # noqa: F401
from .team import Team  # noqa: F401
from .team_member import TeamMember  # noqa: F401
from .pillar import StrategicPillar  # noqa: F401
from .kpi import KPI  # noqa: F401
from .subscription import Subscription  # noqa: F401
from .narrative import Narrative  # noqa: F401
from .commitment import Commitment  # noqa: F401
from .task import Task  # noqa: F401
