# FILE: manifest.py
# Writes the widget code and secret key into the widget's manifest.json.

import json
import os

from errors import FileSystemError

# --- CONFIGURATION ---
MANIFEST_NAME = 'manifest.json'
# ---------------------


def update_manifest(folder, identity):
    """
    Sets widget.code and widget.secret_key in <folder>/manifest.json and
    writes the file back with 2-space indentation. Every other key is kept
    in its original order. Returns the manifest path.
    """
    path = os.path.join(folder, MANIFEST_NAME)

    try:
        with open(path, 'r', encoding='utf-8') as f:
            manifest = json.load(f)
    except FileNotFoundError as e:
        raise FileSystemError(f"{path} not found.") from e
    except json.JSONDecodeError as e:
        raise FileSystemError(f"Could not parse {path}: {e}") from e
    except OSError as e:
        raise FileSystemError(f"Could not read {path}: {e}") from e

    widget = manifest.get('widget') if isinstance(manifest, dict) else None
    if not isinstance(widget, dict):
        raise FileSystemError(f"{path} has no 'widget' object.")

    widget['code'] = identity.code
    widget['secret_key'] = identity.secret_key

    # Write beside the manifest and swap it in, so a failed write keeps the original
    text = json.dumps(manifest, indent=2, ensure_ascii=False)
    tmp_path = path + '.tmp'
    try:
        with open(tmp_path, 'w', encoding='utf-8') as f:
            f.write(text)
        os.replace(tmp_path, path)
    except OSError as e:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise FileSystemError(f"Could not write {path}: {e}") from e

    print(f"{MANIFEST_NAME} updated.")
    return path
