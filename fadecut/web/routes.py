"""JSON job API routes: upload a clip, run a fade job, stream its progress."""

import json
import logging
import queue
import threading
import uuid
from pathlib import Path

from flask import (
    Blueprint,
    Response,
    abort,
    current_app,
    jsonify,
    make_response,
    request,
    send_file,
)

from fadecut.engine import process
from fadecut.errors import ConfigValidationError
from fadecut.settings import Settings

logger = logging.getLogger(__name__)

bp = Blueprint("web", __name__)

# Paths are chosen by the server, never by the request body.
_SERVER_KEYS = ("input_video_path", "output_video_path", "ffmpeg_path", "background_audio_path")

# In-memory job store: job_id -> job dict
_jobs: dict[str, dict] = {}


def _job_or_404(job_id: str) -> dict:
    job = _jobs.get(job_id)
    if job is None:
        abort(make_response(jsonify({"error": "Job not found"}), 404))
    return job


def _save_upload(storage, job_dir: Path, stem: str, default_ext: str) -> Path:
    ext = Path(storage.filename).suffix or default_ext
    path = job_dir / f"{stem}{ext}"
    storage.save(path)
    return path


@bp.route("/api/upload", methods=["POST"])
def upload():
    if "file" not in request.files:
        return jsonify({"error": "No file provided"}), 400

    f = request.files["file"]
    if not f.filename:
        return jsonify({"error": "Empty filename"}), 400

    job_id = uuid.uuid4().hex[:12]
    job_dir = Path(current_app.config["WORK_DIR"]) / job_id
    job_dir.mkdir(parents=True, exist_ok=True)

    input_path = _save_upload(f, job_dir, "input", ".mp4")

    background_path = None
    bg = request.files.get("background")
    if bg is not None and bg.filename:
        background_path = _save_upload(bg, job_dir, "background", ".mp3")

    _jobs[job_id] = {
        "dir": job_dir,
        "input_path": input_path,
        "background_path": background_path,
        "filename": f.filename,
        "status": "uploaded",
    }

    return jsonify({
        "job_id": job_id,
        "filename": f.filename,
        "background": background_path is not None,
    })


@bp.route("/api/jobs/<job_id>/process", methods=["POST"])
def start_process(job_id: str):
    job = _job_or_404(job_id)
    if job["status"] not in ("uploaded", "done", "error"):
        return jsonify({"error": f"Job is already {job['status']}"}), 409

    config = request.get_json(silent=True) or {}
    if not isinstance(config, dict):
        return jsonify({"error": "Settings must be a JSON object"}), 400
    config = {k: v for k, v in config.items() if k not in _SERVER_KEYS}
    input_path = job["input_path"]

    try:
        settings = Settings.from_dict({
            **config,
            "input_video_path": str(input_path),
            "output_video_path": str(job["dir"] / f"output{input_path.suffix}"),
            "ffmpeg_path": current_app.config["FFMPEG_PATH"],
            "background_audio_path": (
                str(job["background_path"]) if job["background_path"] else None
            ),
            # Progress is only available in tracked mode.
            "advanced_log": False,
        })
        settings.validate()
    except ConfigValidationError as e:
        return jsonify({"error": str(e)}), 400

    progress_queue: queue.Queue = queue.Queue()
    job["progress_queue"] = progress_queue
    job["status"] = "processing"
    job["error"] = None

    def run():
        try:
            def on_progress(stage: str, frac: float):
                progress_queue.put({"stage": stage, "progress": round(frac, 3)})

            result = process(settings, on_progress=on_progress, show_bar=False)
            job["result"] = {
                "output_path": str(result.output_path),
                "duration": result.probe.duration,
                "fps": result.probe.fps,
                "clip_start": result.timing.clip_start,
                "clip_end": result.timing.clip_end,
                "topology": result.plan.topology.value,
            }
            job["status"] = "done"
        except Exception as e:
            logger.exception("Job %s failed", job_id)
            job["status"] = "error"
            job["error"] = str(e)
        finally:
            progress_queue.put(None)  # sentinel

    threading.Thread(target=run, daemon=True).start()
    return jsonify({"status": "started"})


def _sse(event: str, payload: dict) -> str:
    return f"event: {event}\ndata: {json.dumps(payload)}\n\n"


@bp.route("/api/jobs/<job_id>/progress")
def progress_stream(job_id: str):
    job = _job_or_404(job_id)
    q = job.get("progress_queue")
    if q is None:
        return jsonify({"error": "No processing in progress"}), 409

    def generate():
        while True:
            try:
                msg = q.get(timeout=120)
            except queue.Empty:
                yield _sse("error", {"error": "timeout"})
                return
            if msg is not None:
                yield _sse("progress", msg)
                continue
            if job["status"] == "error":
                yield _sse("error", {"error": job["error"]})
            else:
                yield _sse("complete", {"progress": 1.0, "result": job.get("result")})
            return

    return Response(generate(), mimetype="text/event-stream")


@bp.route("/api/jobs/<job_id>/status")
def job_status(job_id: str):
    job = _job_or_404(job_id)
    resp = {"status": job["status"], "filename": job.get("filename")}
    if job["status"] == "done":
        resp["result"] = job["result"]
    elif job["status"] == "error":
        resp["error"] = job["error"]
    return jsonify(resp)


@bp.route("/api/jobs/<job_id>/result")
def download_result(job_id: str):
    job = _job_or_404(job_id)
    if job["status"] != "done":
        return jsonify({"error": f"Job is {job['status']}, no output yet"}), 409
    return send_file(Path(job["result"]["output_path"]), as_attachment=False)
