"""Task vertical configuration.

Loads TaskTrackerConfig from the environment once at import, following
the domain config pattern.
"""

from patterns.domain_config import TaskTrackerConfig

# Default configuration instance
config = TaskTrackerConfig.from_env()
