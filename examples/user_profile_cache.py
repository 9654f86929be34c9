"""Example: Caching a user profile to a resource file.

This example saves a profile entity, reloads it from disk, and shows how
autosave on scope exit only writes when the data actually changed.
"""

import argparse
import tempfile
from pathlib import Path

from keepsake import DataResource, read_record


def main():
    parser = argparse.ArgumentParser(description="Cache a user profile to disk")
    parser.add_argument(
        "--name",
        type=str,
        default="user:42",
        help="Entity name (default: user:42)",
    )
    parser.add_argument(
        "--role",
        type=str,
        default="admin",
        help="Initial role (default: admin)",
    )
    parser.add_argument(
        "--new-role",
        type=str,
        default="owner",
        help="Role assigned inside the autosave block (default: owner)",
    )
    parser.add_argument(
        "--directory",
        type=str,
        default=None,
        help="Storage directory (default: a temporary directory)",
    )
    args = parser.parse_args()

    directory = args.directory or tempfile.mkdtemp(prefix="keepsake-")

    profile = DataResource(args.name, {"role": args.role}, directory=directory)
    profile.save()
    path = profile.get_file_path()
    print(f"Saved {profile.name} to {path}")

    record = read_record(path)
    print(f"Stored data: {record['data']}")
    print(f"Stored hash matches: {record['hash'] == profile.hash}")

    loaded = DataResource.load(args.name, directory=directory)
    print(f"Loaded data equal: {loaded.data == profile.data}")

    with DataResource.load(args.name, directory=directory, autosave=True) as entity:
        entity.data = {"role": args.role}
    print(f"Unchanged data dirty: {entity.is_dirty}")

    with DataResource.load(args.name, directory=directory, autosave=True) as entity:
        entity.data = {"role": args.new_role}
    print(f"Role after autosave: {read_record(path)['data']['role']}")
    print(f"Files: {sorted(p.name for p in Path(directory).iterdir())}")


if __name__ == "__main__":
    main()
