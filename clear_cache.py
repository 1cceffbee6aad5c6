import os
import sys

from dotenv import load_dotenv

from memograph.config import Settings


def clear_cache(path: str):
    if os.path.exists(path):
        print(f"Removing note store at {os.path.abspath(path)}...")
        try:
            os.remove(path)
            print("Store cleared successfully.")
        except OSError as e:
            print(f"Error clearing store: {e}")
    else:
        print("No store found to clear.")


if __name__ == "__main__":
    load_dotenv()
    settings = Settings.from_env()
    confirm = input("This will delete all notes and clusters. Are you sure? (y/n): ")
    if confirm.lower() == 'y':
        clear_cache(settings.store_path)
    else:
        print("Operation cancelled.")
        sys.exit(1)
