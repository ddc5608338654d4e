from nfpm_pipe.config.loader import load_project_config, parse_project_config
from nfpm_pipe.config.nfpm import NFPMConfig, NFPMOverridables, ProjectConfig
from nfpm_pipe.config.settings import PipeSettings

__all__ = [
    "NFPMConfig",
    "NFPMOverridables",
    "PipeSettings",
    "ProjectConfig",
    "load_project_config",
    "parse_project_config",
]
