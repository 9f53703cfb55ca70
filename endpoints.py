# Buzzheavier public API; update if endpoints change.

API_BASE = "https://buzzheavier.com/api"
UPLOAD_BASE = "https://w.buzzheavier.com"

ACCOUNT = {
    "locations": {
        "method": "GET",
        "path": "/locations",
        "auth": False,
    },
    "info": {
        "method": "GET",
        "path": "/account",
        "auth": True,
    },
}

FS = {
    "root": {
        "method": "GET",
        "path": "/fs",
        "auth": True,
    },
    "get": {
        "method": "GET",
        "path": "/fs/{id}",
        "auth": True,
    },
    "create": {
        "method": "POST",
        "path": "/fs",
        "auth": True,
    },
    "rename": {
        "method": "PATCH",
        "path": "/fs/{id}",
        "auth": True,
    },
    "move": {
        "method": "PUT",
        "path": "/fs/{id}",
        "auth": True,
    },
    "note": {
        "method": "PUT",
        "path": "/fs/{id}",
        "auth": True,
    },
    "delete": {
        "method": "DELETE",
        "path": "/fs/{id}",
        "auth": True,
    },
}

UPLOAD = {
    "anonymous": {
        "method": "PUT",
        "path": "/{fileName}",
        "auth": False,
    },
    "directory": {
        "method": "PUT",
        "path": "/{parentId}/{fileName}",
        "auth": True,
    },
}

NOTE_MAX_CHARS = 500
