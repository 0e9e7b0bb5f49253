"""YAML config loading with env var expansion."""

import logging
import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import EvtagConfig

logger = logging.getLogger(__name__)


def load_config(cli_path: str | None = None) -> EvtagConfig:
    """Load config with resolution order: CLI > project-local > user-global > defaults."""
    if cli_path and not Path(cli_path).exists():
        raise ValueError(f"Config file {cli_path} not found")
    config_paths = [
        Path(cli_path) if cli_path else None,
        Path("./evtag.yaml"),
        Path.home() / ".evtag" / "config.yaml",
    ]

    for path in config_paths:
        if path and path.exists():
            try:
                with open(path) as f:
                    raw = yaml.safe_load(f)
                if raw is None:
                    logger.debug("Skipping empty config file %s", path)
                    continue
                raw = _expand_env_vars(raw)
                config = EvtagConfig(**raw)
                logger.debug("Loaded config from %s", path)
                return config
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e
            except ValidationError as e:
                raise ValueError(f"Invalid config in {path}: {e}") from e

    logger.debug("No config file found, using defaults")
    return EvtagConfig()


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `evtag config init`
DEFAULT_CONFIG_TEMPLATE = """\
# evtag.yaml

# Digest
digest:
  format: "v0"                 # v0 | plain
  with_stats: false            # add the "# git-evtag comment:" line when signing
  with_legacy_archive: false   # also record the SHA-256 of `git archive --format=tar`

# Submodules
submodules:
  require_recorded_commit: false   # fail instead of warn when a checkout differs from the tree

# Git
git:
  executable: "git"
  repository: "."

# Tags
tag:
  sign: true                   # git tag -s; false creates an annotated, unsigned tag
  # key_id: "0xDEADBEEF"
  # editor: "${GIT_EDITOR}"
  allow_dirty: false
  verify_signature: true

# Logging
log_level: "warn"              # debug | info | warn | error
"""
