"""Profile system for Agent OS.

Profiles are named bundles of standards, workflows, commands and agents that
inherit from one another.
"""

from .manager import create_profile
from .manager import list_profiles
from .manager import validate_profile_name
from .resolver import ProfileResolver
from .schema import ChainResolution
from .schema import FileListing
from .schema import Profile
from .schema import Resolution
from .schema import ResolveStatus
from .yaml_mini import get_yaml_array
from .yaml_mini import get_yaml_value

__all__ = [
    "ChainResolution",
    "FileListing",
    "Profile",
    "ProfileResolver",
    "Resolution",
    "ResolveStatus",
    "create_profile",
    "get_yaml_array",
    "get_yaml_value",
    "list_profiles",
    "validate_profile_name",
]
