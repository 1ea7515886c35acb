from pydantic import BaseModel, Field, field_validator

from src.components.album_share.models import ContextLifetime


class ProjectRules(BaseModel):
    slug: str
    rules_version: str
    required_sections: list[str]

class SessionDefaults(BaseModel):
    name_prefix: str = "album_"
    suppress_duplicates: bool = False
    context_lifetime: ContextLifetime = ContextLifetime.BOUND_TO_CALLER

class LegacyStorageRules(BaseModel):
    shared_root: str = "./shared"
    relative_dir: str = "DCIM/Camera"

    @field_validator("relative_dir")
    @classmethod
    def _relative_only(cls, v: str) -> str:
        if v.startswith("/") or ".." in v.split("/"):
            raise ValueError("relative_dir must stay inside shared_root")
        return v

class IndexedStorageRules(BaseModel):
    db_path: str = "./media_index.db"
    blob_dir: str = "./media_blobs"
    mime_type: str = "image/jpeg"
    infer_mime_type: bool = False

class PlatformRules(BaseModel):
    sdk_version: int = 33
    scoped_storage_version: int = 29
    media_permission_version: int = 33

class PermissionRules(BaseModel):
    broad_write: str = "android.permission.WRITE_EXTERNAL_STORAGE"
    scoped_read: str = "android.permission.READ_MEDIA_IMAGES"

class TransferRules(BaseModel):
    buffer_size: int = Field(default=1024, gt=0)

class AlbumShareRules(BaseModel):
    session: SessionDefaults = SessionDefaults()
    legacy: LegacyStorageRules = LegacyStorageRules()
    indexed: IndexedStorageRules = IndexedStorageRules()
    platform: PlatformRules = PlatformRules()
    permissions: PermissionRules = PermissionRules()
    transfer: TransferRules = TransferRules()

class OpsRules(BaseModel):
    required_env: list[str] = []
    shared_root_writable_required: bool = True

class Rules(BaseModel):
    project: ProjectRules
    album_share: AlbumShareRules
    ops: OpsRules = OpsRules()
