"""Back up the database with `mysqldump`.

Without the MySQL client tools installed, use MySQL Workbench or phpMyAdmin
instead.
"""

from __future__ import annotations

import importlib
import os
import subprocess
import sys
from datetime import datetime
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db = settings.DB_CONFIG

    out_dir = REPO_ROOT / "backups"
    out_dir.mkdir(parents=True, exist_ok=True)

    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    out_file = out_dir / f"kindergarten_{ts}.sql"

    cmd = [
        "mysqldump",
        f"-h{db['host']}",
        f"-P{db.get('port', 3306)}",
        f"-u{db['user']}",
        "--single-transaction",
        db["database"],
    ]
    # Password goes through the environment so it never shows up in `ps`
    env = {**os.environ, "MYSQL_PWD": str(db.get("password") or "")}

    try:
        with out_file.open("wb") as f:
            subprocess.run(cmd, stdout=f, stderr=subprocess.PIPE, check=True, env=env)
        print(f"OK: backup created: {out_file}")
    except FileNotFoundError:
        raise SystemExit("`mysqldump` not found. Install the MySQL client tools or back up with Workbench.")
    except subprocess.CalledProcessError as e:
        out_file.unlink(missing_ok=True)
        raise SystemExit(f"mysqldump failed: {e.stderr.decode(errors='replace').strip()}")


if __name__ == "__main__":
    main()
