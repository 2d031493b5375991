# FILE: archive.py
# Packs the widget folder into the zip the upload endpoint expects.

import os
import pathlib
import zipfile

from errors import FileSystemError

# --- CONFIGURATION ---
ARCHIVE_NAME = 'widget.zip'
COMPRESSION_LEVEL = 9
# ---------------------


def build_archive(folder, archive_path=ARCHIVE_NAME):
    """
    Zips every file under `folder` at its path relative to `folder`, so the
    folder name itself never appears in the archive. Returns the absolute
    archive path. A failed build leaves no archive behind.
    """
    root = pathlib.Path(folder).resolve()
    out = pathlib.Path(archive_path).resolve()

    if not root.is_dir():
        raise FileSystemError(f"Widget folder {folder} does not exist.")

    try:
        with zipfile.ZipFile(out, 'w', compression=zipfile.ZIP_DEFLATED,
                             compresslevel=COMPRESSION_LEVEL) as z:
            for p in sorted(root.rglob('*')):
                if p.is_dir() or p == out:
                    continue
                z.write(p, arcname=p.relative_to(root).as_posix())
    except (OSError, zipfile.BadZipFile, ValueError) as e:
        if out.exists():
            os.remove(out)
        raise FileSystemError(f"Could not build archive {out}: {e}") from e

    print(f"Archive created: {out}")
    return str(out)
