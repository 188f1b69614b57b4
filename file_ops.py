import os
import shutil
import tempfile
from logger import setup_logger

logger = setup_logger()


def temp_path_for(target_path: str) -> str:
    """Temporary sibling of the target, so the final move stays on one filesystem."""
    directory, name = os.path.split(os.path.abspath(target_path))
    return os.path.join(directory, f".ffmux_tmp_{name}")


def discard(path: str) -> None:
    """Removes a partially written output, if any."""
    if not os.path.exists(path):
        return
    try:
        os.remove(path)
        logger.info(f"Removed partial output {path}")
    except OSError as e:
        logger.warning(f"Could not remove partial output {path}: {e}")


def safe_promote(new_path: str, target_path: str, overwrite: bool = False) -> bool:
    """
    Moves a finished temporary file into target_path. An existing target is
    only replaced when overwrite is set; on failure the temporary file is
    removed and the target is left as it was.
    """
    if not os.path.exists(new_path):
        logger.error(f"New file not found: {new_path}")
        return False

    if os.path.exists(target_path) and not overwrite:
        logger.error(f"Target already exists: {target_path}")
        discard(new_path)
        return False

    backup_path = None
    try:
        # 1. Keep the old target under a unique name until the new one is in place
        if os.path.exists(target_path):
            fd, backup_path = tempfile.mkstemp(dir=os.path.dirname(os.path.abspath(target_path)),
                                               prefix=".ffmux_bak_")
            os.close(fd)
            os.replace(target_path, backup_path)

        # 2. Move new file to TARGET path
        shutil.move(new_path, target_path)

        # 3. Cleanup
        if backup_path and os.path.exists(backup_path):
            os.remove(backup_path)
        logger.info(f"Wrote {target_path}")
        return True

    except OSError as e:
        logger.error(f"Failed to move {new_path} -> {target_path}: {e}")
        # Rollback: restore the previous target from backup
        if backup_path and os.path.exists(backup_path) and not os.path.exists(target_path):
            try:
                os.replace(backup_path, target_path)
                logger.info("Rolled back previous target file.")
            except OSError as rb_e:
                logger.critical(f"CRITICAL: Failed to rollback {target_path}: {rb_e}")
        discard(new_path)
        return False
