from pydantic import BaseModel, Field
from typing import Literal

from evtag_core.digest.formats import DigestFormat


class DigestSettings(BaseModel):
    format: Literal["v0", "plain"] = "v0"
    with_stats: bool = False
    with_legacy_archive: bool = False

    @property
    def digest_format(self) -> DigestFormat:
        return DigestFormat(self.format)


class SubmoduleSettings(BaseModel):
    require_recorded_commit: bool = False


class GitSettings(BaseModel):
    executable: str = "git"
    repository: str = "."


class TagSettings(BaseModel):
    sign: bool = True
    key_id: str | None = None
    editor: str | None = None
    allow_dirty: bool = False
    verify_signature: bool = True


class EvtagConfig(BaseModel):
    digest: DigestSettings = Field(default_factory=DigestSettings)
    submodules: SubmoduleSettings = Field(default_factory=SubmoduleSettings)
    git: GitSettings = Field(default_factory=GitSettings)
    tag: TagSettings = Field(default_factory=TagSettings)
    log_level: Literal["debug", "info", "warn", "error"] = "warn"
