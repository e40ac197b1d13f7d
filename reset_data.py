"""
reset_data.py
-------------
Clear every table of the local data store (the file named by DATA_PATH).

Development only; it refuses to run against the hosted backend.

Usage:
    $ python reset_data.py

Repopulate demo data afterwards with:
    $ python seeds.py
"""

from dealership.config import Config
from dealership.models.store import Store


def main():
    if Config.DATA_BACKEND != "local":
        print("❌ DATA_BACKEND is not 'local'; refusing to wipe a hosted backend.")
        return

    store = Store(Config.DATA_PATH, upload_dir=Config.UPLOAD_DIR)
    store.clear()

    print(f"✅ {Config.DATA_PATH} has been successfully cleared.")
    print("💡 Tip: Run `python seeds.py` to regenerate demo data.")


if __name__ == "__main__":
    main()
