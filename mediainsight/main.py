from flask import Flask, jsonify, request
from flask_cors import CORS
import json
import os
import logging

from pipeline import config, ingest, tasks
from pipeline.errors import MediaNotFoundError, UnsupportedMediaError
from pipeline.media import MediaAsset

logging.basicConfig(level=logging.INFO, format="%(message)s")

app = Flask(__name__)
CORS(
    app,
    methods=["POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

MISSING_INPUT_ERROR = "Provide either multipart 'file' upload or JSON 'media_path'/'media_url'"


def error_status(exc: Exception) -> int:
    if isinstance(exc, UnsupportedMediaError):
        return 400
    if isinstance(exc, MediaNotFoundError):
        return 404
    return 500


def _asset_from_request():
    """Build the media asset from the request, or return an error response."""
    if request.mimetype == "multipart/form-data":
        upload = request.files.get("file")
        if upload is None or not upload.filename:
            return None, (jsonify({"error": "No file uploaded"}), 400)
        local_path = ingest.save_upload(upload.stream, upload.filename, config.get_upload_root())
        declared = upload.mimetype if upload.mimetype != "application/octet-stream" else None
        return MediaAsset(local_path, upload.filename, declared), None

    data = request.get_json(silent=True) or {}
    media_path = data.get("media_path")
    media_url = data.get("media_url")
    if media_path:
        local_path = ingest.resolve_local_media(media_path)
        return MediaAsset.from_path(local_path), None
    if media_url:
        local_path, display_name = ingest.download_media(media_url, config.get_upload_root())
        return MediaAsset(local_path, display_name), None
    return None, (jsonify({"error": MISSING_INPUT_ERROR}), 400)


@app.route("/analyze", methods=["POST"])
def analyze():
    try:
        asset, error_response = _asset_from_request()
        if error_response is not None:
            logging.info(json.dumps({"event": "bad_request"}))
            return error_response
        logging.info(
            json.dumps(
                {
                    "event": "request",
                    "file": asset.display_name,
                    "kind": asset.kind.value,
                }
            )
        )

        result = tasks.run(asset)

        logging.info(
            json.dumps(
                {
                    "event": "analysis_complete",
                    "request_id": result.request_id,
                    "output_dir": result.output_dir,
                }
            )
        )
        return jsonify(result.to_response()), 200

    except Exception as e:
        logging.exception("Error in /analyze")
        logging.error(json.dumps({"event": "analyze_error", "error": str(e)}))
        return jsonify({"error": str(e)}), error_status(e)


@app.route("/health", methods=["GET"])
def health():
    return jsonify({"status": "ok", "model": config.get_model_name()}), 200


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8080))
    app.run(host="0.0.0.0", port=port, threaded=True)
