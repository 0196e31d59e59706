# Overview: Flask API routes for file uploads, ACL repair and maintenance scripts.

"""
Upload & Maintenance Routes

- POST /api/generate-upload-url {fileName, fileType} -> {uploadUrl, fileName, publicUrl}
- POST /api/fix-file-acl {fileName} -> {success, fileUrl, fileName}
- POST /api/fix-all-files -> {success, fixedCount, failedCount, totalFiles}
- POST /api/run-script {script} -> {success, output, fixedCount?, failedCount?, totalFiles?}
"""

from flask import Blueprint, request, jsonify, current_app

from ..decorators import handles_errors
from ..services import storage_service, script_service
from ..services.storage_service import StorageNotConfiguredError, StorageError
from ..services.script_service import UnknownScriptError, ScriptTimeoutError, ScriptExecutionError


uploads_bp = Blueprint("uploads", __name__, url_prefix="/api")


@uploads_bp.post("/generate-upload-url")
@handles_errors("generate upload URL")
def generate_upload_url_route():
    data = request.get_json(silent=True) or {}
    return jsonify(storage_service.generate_upload_url(data.get("fileName"), data.get("fileType")))


@uploads_bp.post("/fix-file-acl")
def fix_file_acl_route():
    data = request.get_json(silent=True) or {}
    if not data.get("fileName"):
        return jsonify({"error": "fileName is required"}), 400

    try:
        return jsonify(storage_service.fix_file_acl(data["fileName"]))
    except StorageNotConfiguredError as e:
        return jsonify({"error": str(e)}), 500
    except StorageError as e:
        current_app.logger.error("Failed to fix file ACL: %s", e)
        return jsonify({"error": "Failed to fix file ACL", "details": str(e)}), 500
    except Exception:
        current_app.logger.exception("Failed to fix file ACL")
        return jsonify({"error": "Internal server error"}), 500


@uploads_bp.post("/fix-all-files")
def fix_all_files_route():
    try:
        return jsonify(storage_service.fix_all_files())
    except StorageNotConfiguredError as e:
        return jsonify({"error": str(e)}), 500
    except StorageError as e:
        current_app.logger.error("Failed to fix files ACL: %s", e)
        return jsonify({"error": "Failed to fix files ACL", "details": str(e)}), 500
    except Exception:
        current_app.logger.exception("Failed to fix files ACL")
        return jsonify({"error": "Internal server error"}), 500


@uploads_bp.post("/run-script")
def run_script_route():
    data = request.get_json(silent=True) or {}
    script = data.get("script")

    try:
        return jsonify(script_service.run_script(script))
    except UnknownScriptError as e:
        return jsonify({"error": str(e), "allowedScripts": e.allowed}), 400
    except ScriptTimeoutError:
        current_app.logger.warning("Script %s timed out", script)
        return jsonify({
            "error": "Script execution timed out",
            "details": "The operation took too long to complete. Please try again.",
        }), 408
    except ScriptExecutionError as e:
        current_app.logger.error("Script %s failed: %s", script, e)
        return jsonify({
            "error": "Failed to run script",
            "details": str(e),
            "stdout": e.stdout,
            "stderr": e.stderr,
        }), 500
    except Exception:
        current_app.logger.exception("Failed to run script")
        return jsonify({"error": "Internal server error"}), 500
