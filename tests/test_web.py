"""Unit tests for the fadecut JSON job API."""

import io
from unittest.mock import MagicMock, patch

import pytest

from fadecut.web import create_app


@pytest.fixture
def app(tmp_path):
    app = create_app(work_dir=tmp_path, ffmpeg_path="/opt/ffmpeg")
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def _upload(client, filename="test.mp4", content=b"fake video data", background=None):
    data = {"file": (io.BytesIO(content), filename)}
    if background is not None:
        data["background"] = (io.BytesIO(b"fake audio"), background)
    return client.post(
        "/api/upload",
        data=data,
        content_type="multipart/form-data",
    )


class TestUpload:
    def test_upload_success(self, client):
        resp = _upload(client)
        assert resp.status_code == 200
        data = resp.get_json()
        assert "job_id" in data
        assert data["filename"] == "test.mp4"
        assert data["background"] is False

    def test_upload_no_file(self, client):
        resp = client.post("/api/upload")
        assert resp.status_code == 400

    def test_upload_creates_files(self, client, tmp_path):
        resp = _upload(client, content=b"CONTENT", background="music.wav")
        job_id = resp.get_json()["job_id"]
        assert (tmp_path / job_id / "input.mp4").read_bytes() == b"CONTENT"
        assert (tmp_path / job_id / "background.wav").exists()
        assert resp.get_json()["background"] is True


class TestProcess:
    def test_process_unknown_job(self, client):
        resp = client.post("/api/jobs/nonexistent/process", json={"video_bitrate": "5M"})
        assert resp.status_code == 404

    def test_process_unknown_job_is_json(self, client):
        resp = client.post("/api/jobs/nonexistent/process", json={"video_bitrate": "5M"})
        assert resp.get_json() == {"error": "Job not found"}

    def test_process_non_object_body(self, client):
        job_id = _upload(client).get_json()["job_id"]
        resp = client.post(f"/api/jobs/{job_id}/process", json=[1, 2])
        assert resp.status_code == 400
        assert "JSON object" in resp.get_json()["error"]

    def test_process_invalid_settings(self, client):
        job_id = _upload(client).get_json()["job_id"]
        resp = client.post(f"/api/jobs/{job_id}/process", json={"video_speed": "fast"})
        assert resp.status_code == 400
        assert "video_speed" in resp.get_json()["error"]

    def test_process_missing_bitrate(self, client):
        job_id = _upload(client).get_json()["job_id"]
        resp = client.post(f"/api/jobs/{job_id}/process", json={})
        assert resp.status_code == 400

    @patch("fadecut.web.routes.threading.Thread")
    def test_process_starts(self, mock_thread, client, tmp_path):
        job_id = _upload(client, background="music.mp3").get_json()["job_id"]

        resp = client.post(
            f"/api/jobs/{job_id}/process",
            json={
                "video_bitrate": "5M",
                "video_speed": 2,
                "input_video_path": "/etc/passwd",
                "ffmpeg_path": "/bin/sh",
            },
        )
        assert resp.status_code == 200
        assert resp.get_json()["status"] == "started"
        mock_thread.return_value.start.assert_called_once()

        status = client.get(f"/api/jobs/{job_id}/status").get_json()
        assert status["status"] == "processing"

    @patch("fadecut.web.routes.process")
    def test_job_runs_with_server_paths(self, mock_process, client, tmp_path):
        result = MagicMock()
        result.output_path = tmp_path / "out.mp4"
        result.probe.duration = 90.5
        result.probe.fps = 25.0
        result.timing.clip_start = 0.0
        result.timing.clip_end = 90.5
        result.plan.topology.value = "mix"

        def fake_process(settings, on_progress=None, **kwargs):
            on_progress("Encoding", 0.5)
            return result

        mock_process.side_effect = fake_process

        job_id = _upload(client, background="music.mp3").get_json()["job_id"]
        client.post(
            f"/api/jobs/{job_id}/process",
            json={"video_bitrate": "5M", "ffmpeg_path": "/bin/sh"},
        )

        # Drain the event stream; it ends when the worker thread finishes.
        body = client.get(f"/api/jobs/{job_id}/progress").get_data(as_text=True)
        assert "event: progress\n" in body
        assert '"stage": "Encoding"' in body
        assert body.rstrip().split("\n\n")[-1].startswith("event: complete\n")

        settings = mock_process.call_args[0][0]
        assert settings.ffmpeg_path == "/opt/ffmpeg"
        assert settings.input_video_path == str(tmp_path / job_id / "input.mp4")
        assert settings.background_audio_path == str(tmp_path / job_id / "background.mp3")
        assert settings.advanced_log is False

        status = client.get(f"/api/jobs/{job_id}/status").get_json()
        assert status["status"] == "done"
        assert status["result"]["topology"] == "mix"

    @patch("fadecut.web.routes.process")
    def test_job_error_reported(self, mock_process, client):
        mock_process.side_effect = RuntimeError("FFmpeg command failed with status: exit status: 1")
        job_id = _upload(client).get_json()["job_id"]
        client.post(f"/api/jobs/{job_id}/process", json={"video_bitrate": "5M"})

        body = client.get(f"/api/jobs/{job_id}/progress").get_data(as_text=True)
        assert "exit status: 1" in body
        assert "event: error\n" in body
        assert "event: complete" not in body
        status = client.get(f"/api/jobs/{job_id}/status").get_json()
        assert status["status"] == "error"


class TestStatus:
    def test_status_after_upload(self, client):
        job_id = _upload(client).get_json()["job_id"]
        resp = client.get(f"/api/jobs/{job_id}/status")
        assert resp.status_code == 200
        assert resp.get_json()["status"] == "uploaded"

    def test_status_unknown_job(self, client):
        resp = client.get("/api/jobs/nonexistent/status")
        assert resp.status_code == 404

    def test_progress_before_processing(self, client):
        job_id = _upload(client).get_json()["job_id"]
        resp = client.get(f"/api/jobs/{job_id}/progress")
        assert resp.status_code == 409


class TestDownload:
    def test_download_not_complete(self, client):
        job_id = _upload(client).get_json()["job_id"]
        resp = client.get(f"/api/jobs/{job_id}/result")
        assert resp.status_code == 409

    def test_download_unknown_job(self, client):
        resp = client.get("/api/jobs/nonexistent/result")
        assert resp.status_code == 404


class TestNotFound:
    def test_root_is_json_404(self, client):
        resp = client.get("/")
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "Not found"}
