from toursite.backup.models import BackupFileInfo, BackupResult, RestoreResult
from toursite.backup.service import (
    create_app_data_backup,
    create_complete_backup,
    delete_backup,
    export_app_data,
    import_app_data,
    list_backups,
    resolve_backup_path,
    restore_complete_archive,
    stream_restore_complete,
)

__all__ = [
    "BackupFileInfo",
    "BackupResult",
    "RestoreResult",
    "create_app_data_backup",
    "create_complete_backup",
    "delete_backup",
    "export_app_data",
    "import_app_data",
    "list_backups",
    "resolve_backup_path",
    "restore_complete_archive",
    "stream_restore_complete",
]
