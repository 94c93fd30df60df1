"""
Special-folder placeholders usable in project paths.

A locator such as

    [MyDocuments]/SpiraTest-3-0-Web-Service-soapui-project.xml|Requirements Testing|Get Requirements

has its placeholders replaced textually before the path is checked.
"""
import os
from pathlib import Path
from typing import Dict, Optional

PLACEHOLDERS = (
    "MyDocuments",
    "CommonDocuments",
    "DesktopDirectory",
    "ProgramFiles",
    "ProgramFilesX86",
)


def get_special_folders() -> Dict[str, str]:
    """Map each placeholder name to this machine's folder."""
    home = Path.home()
    if os.name == "nt":
        public = os.environ.get("PUBLIC", r"C:\Users\Public")
        return {
            "MyDocuments": str(home / "Documents"),
            "CommonDocuments": str(Path(public) / "Documents"),
            "DesktopDirectory": str(home / "Desktop"),
            "ProgramFiles": os.environ.get("ProgramFiles", r"C:\Program Files"),
            "ProgramFilesX86": os.environ.get("ProgramFiles(x86)", r"C:\Program Files (x86)"),
        }
    return {
        "MyDocuments": str(home / "Documents"),
        "CommonDocuments": "/usr/share",
        "DesktopDirectory": str(home / "Desktop"),
        "ProgramFiles": "/opt",
        "ProgramFilesX86": "/opt",
    }


def resolve_placeholders(path: str, folders: Optional[Dict[str, str]] = None) -> str:
    """Replace every [Placeholder] in a path with its special folder."""
    folders = folders if folders is not None else get_special_folders()
    for name, folder in folders.items():
        path = path.replace(f"[{name}]", folder)
    return path
