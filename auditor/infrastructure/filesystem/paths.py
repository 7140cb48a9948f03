"""Path resolution shared by the filesystem helpers."""
from pathlib import Path

from auditor.infrastructure.exceptions import FilesystemError


def resolve_within(base_path: Path, path: Path) -> Path:
    """Resolve path ensuring it's within base directory."""
    path = Path(path)
    if path.is_absolute():
        full_path = path
    else:
        full_path = base_path / path

    resolved = full_path.resolve()

    try:
        resolved.relative_to(base_path)
    except ValueError:
        raise FilesystemError(
            f"Path '{path}' resolves outside base directory", path=str(path)
        )

    return resolved
