from __future__ import annotations

from flask import Flask, send_from_directory

from ..container import Container


def register(app: Flask, container: Container) -> None:
    """Serve stored documents at the URLs ``LocalDocumentStorage`` hands out."""
    storage = container.storage
    # relative roots would otherwise resolve against the app package
    root = storage.root.resolve()

    @app.route(f"{storage.base_url}/<path:storage_id>", methods=["GET"], endpoint="documents_download")
    def download_document(storage_id: str):
        return send_from_directory(root, storage_id)
