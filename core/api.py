"""Flask API for uploading recordings and editing QC-annotated transcripts."""

import hashlib
import logging
from pathlib import Path

from flask import Flask, Response, request
from werkzeug.exceptions import HTTPException
from werkzeug.utils import secure_filename

from core.config import settings
from core.errors import InputError, NotFoundError, ServiceError
from core.store import TranscriptStore, create_store
from core.utils import download_response, json_response
from qc.service import TranscriptQCService

logger = logging.getLogger(__name__)

API_PREFIX = "/api/file"


def upload_path(filename: str) -> Path:
    """Location of an uploaded recording, unique per client filename."""
    digest = hashlib.sha256(filename.encode("utf-8")).hexdigest()[:32]
    suffix = Path(secure_filename(filename)).suffix
    return Path(settings.upload_dir) / f"{digest}{suffix}"


def create_app(
    store: TranscriptStore | None = None,
    service: TranscriptQCService | None = None,
) -> Flask:
    """Build the Flask app around an injected store and QC service."""
    app = Flask(__name__)
    if service is None:
        service = TranscriptQCService(store or create_store())

    @app.errorhandler(ServiceError)
    def handle_service_error(e: ServiceError) -> Response:
        if e.status_code >= 500:
            logger.error("%s: %s", e.error_code, e)
        return json_response(e.to_dict(), e.status_code)

    @app.errorhandler(Exception)
    def handle_unexpected_error(e: Exception) -> Response:
        if isinstance(e, HTTPException):
            return json_response(
                {"error": e.name.upper().replace(" ", "_"), "message": e.description or ""},
                e.code or 500,
            )
        logger.exception("Unexpected error")
        return json_response({"error": "INTERNAL_ERROR", "message": f"An error occurred: {e}"}, 500)

    @app.route(f"{API_PREFIX}/upload", methods=["POST"])
    def upload() -> Response:
        """Transcribe an uploaded recording and QC each word."""
        file = request.files.get("file")
        if file is None or not file.filename:
            raise InputError("No file uploaded.")

        path = upload_path(file.filename)
        path.parent.mkdir(parents=True, exist_ok=True)
        file.save(path)
        if path.stat().st_size == 0:
            path.unlink(missing_ok=True)
            raise InputError("No file uploaded.")

        logger.info("Received upload %s (%d bytes)", file.filename, path.stat().st_size)
        transcript = service.process_upload(path, file.filename)
        return json_response(transcript.to_dict())

    @app.route(f"{API_PREFIX}/get-json/<filename>", methods=["GET"])
    def get_transcript(filename: str) -> Response:
        return json_response(service.get_transcript(filename).to_dict())

    @app.route(f"{API_PREFIX}/update-json/<filename>", methods=["POST"])
    def update_transcript(filename: str) -> Response:
        service.update_transcript(filename, request.get_json(silent=True))
        return json_response({"message": "JSON updated successfully"})

    @app.route(f"{API_PREFIX}/download/<filename>", methods=["GET"])
    def download(filename: str) -> Response:
        transcript = service.get_transcript(filename)
        return download_response(transcript.to_dict(), secure_filename(filename) or "transcript")

    @app.route(f"{API_PREFIX}/recheck/<filename>/<int:index>", methods=["POST"])
    def recheck(filename: str, index: int) -> Response:
        """Re-run QC for a single (typically edited) word."""
        path = upload_path(filename)
        if not path.exists():
            raise NotFoundError(f"Audio for {filename} not found")
        result = service.recheck_word(path, filename, index)
        return json_response({"qc": result.passed, "qc_word": result.alternative_text})

    @app.route("/health", methods=["GET"])
    def health() -> Response:
        return json_response({"status": "ok"})

    return app


def run() -> None:
    logging.basicConfig(level=logging.INFO)
    app = create_app()
    app.run(host=settings.server_host, port=settings.server_port, debug=False)


if __name__ == "__main__":
    run()
