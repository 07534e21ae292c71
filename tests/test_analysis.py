"""End-to-end behaviour of /analyze and /analyze-audio against mocked backends."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import httpx
import pytest

from app.domain import MediaKind

AUDIO_VERDICT = {"final_decision": "ARTIFICIAL", "final_probability": 0.92}


def _audio_completed(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"status": "completed", "results": [AUDIO_VERDICT]})


def test_image_inline_success_leaves_no_files(client, image_stub, leftovers) -> None:
    image_stub.handler = lambda request: httpx.Response(
        200, json={"status": "ok", "results": [{"label": "real", "confidence": 0.81}]}
    )

    response = client.post("/analyze", files={"image": ("photo.png", b"\x89PNG", "image/png")})

    assert response.status_code == 200
    assert response.json() == {"results": [{"label": "real", "confidence": 0.81}]}
    assert leftovers() == []
    assert "X-Request-ID" in response.headers


def test_image_upload_keeps_original_extension(client, image_stub) -> None:
    image_stub.handler = lambda request: httpx.Response(200, json={"status": "ok", "results": [{"label": "real"}]})

    client.post("/analyze", files={"image": ("SCAN.PNG", b"\x89PNG", "image/png")})

    sent = json.loads(image_stub.submissions()[0].content)
    assert sent["paths"]["input"].endswith(".PNG")


def test_image_result_file_is_returned_and_removed(client, image_stub, store, leftovers) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        (store.output_dir / "result-42.json").write_text('{"heatmap": [0.1, 0.2], "label": "fake"}')
        return httpx.Response(200, json={"status": "ok", "results": [{"result_path": "/app/output/result-42.json"}]})

    image_stub.handler = handler

    response = client.post("/analyze", files={"image": ("photo", b"\xff\xd8", "image/jpeg")})

    assert response.status_code == 200
    assert response.json() == {"heatmap": [0.1, 0.2], "label": "fake"}
    assert leftovers() == []
    sent = image_stub.submissions()[0]
    assert sent.content.decode().count(".jpg") == 1


@pytest.mark.parametrize(
    ("path", "error"),
    [
        ("/analyze", "No image file provided"),
        ("/analyze-audio", "No audio file provided"),
    ],
)
def test_missing_upload_is_rejected_before_any_work(
    client, image_stub, audio_stub, store, path, error
) -> None:
    response = client.post(path, files={"wrong_field": ("clip.bin", b"data", "application/octet-stream")})

    assert response.status_code == 400
    assert response.json()["error"] == error
    assert "message" in response.json()
    assert image_stub.calls == [] and audio_stub.calls == []
    assert not store.output_dir.exists()
    assert not store.directory_for(MediaKind.IMAGE).exists()
    assert not store.directory_for(MediaKind.AUDIO).exists()


@pytest.mark.parametrize(
    ("path", "field", "error"),
    [
        ("/analyze", "image", "No image file provided"),
        ("/analyze-audio", "audio", "No audio file provided"),
    ],
)
def test_text_value_in_media_field_is_rejected(
    client, image_stub, audio_stub, store, path, field, error
) -> None:
    response = client.post(path, data={field: "not-a-file"})

    assert response.status_code == 400
    assert response.json() == {"error": error, "message": error}
    assert image_stub.calls == [] and audio_stub.calls == []
    assert not store.directory_for(MediaKind.IMAGE).exists()
    assert not store.directory_for(MediaKind.AUDIO).exists()


def test_descriptor_write_failure_releases_upload_and_counter(
    client, audio_stub, store, tracker, leftovers, monkeypatch
) -> None:
    write_bytes = store._write_bytes

    def failing_write(target: Path, data: bytes) -> None:
        if target.suffix == ".json":
            raise OSError("disk full")
        write_bytes(target, data)

    monkeypatch.setattr(store, "_write_bytes", failing_write)

    response = client.post("/analyze-audio", files={"audio": ("clip.wav", b"RIFF", "audio/wav")})

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to process audio"
    assert "disk full" in response.json()["message"]
    assert audio_stub.calls == []
    assert tracker.in_flight == 0
    assert store.directory_for(MediaKind.AUDIO).exists()
    assert leftovers() == []


def test_empty_upload_is_rejected(client, audio_stub) -> None:
    response = client.post("/analyze-audio", files={"audio": ("clip.wav", b"", "audio/wav")})

    assert response.status_code == 400
    assert response.json()["error"] == "Uploaded audio file is empty"
    assert audio_stub.calls == []


def test_non_success_status_cleans_up_input(client, image_stub, leftovers) -> None:
    image_stub.handler = lambda request: httpx.Response(200, json={"status": "error", "message": "model crashed"})

    response = client.post("/analyze", files={"image": ("photo.jpg", b"\xff\xd8", "image/jpeg")})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Failed to process image"
    assert "status='error'" in body["message"]
    assert len(image_stub.submissions()) == 1
    assert leftovers() == []


def test_image_result_timeout_is_server_error(client, image_stub, leftovers) -> None:
    image_stub.handler = lambda request: httpx.Response(
        200, json={"status": "ok", "results": [{"result_path": "/app/output/never.json"}]}
    )

    response = client.post("/analyze", files={"image": ("photo.jpg", b"\xff\xd8", "image/jpeg")})

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to process image"
    assert "Timeout waiting for file" in response.json()["message"]
    assert leftovers() == []


def test_audio_returns_first_result_entry(client, audio_stub, tracker, leftovers) -> None:
    audio_stub.handler = _audio_completed

    response = client.post("/analyze-audio", files={"audio": ("voice.mp3", b"ID3", "audio/mpeg")})

    assert response.status_code == 200
    assert response.json() == AUDIO_VERDICT
    assert tracker.in_flight == 0
    assert leftovers() == []


def test_audio_timeout_is_gateway_timeout(client, audio_stub, tracker, leftovers) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("backend too slow", request=request)

    audio_stub.handler = handler

    response = client.post("/analyze-audio", files={"audio": ("long.wav", b"RIFF", "audio/wav")})

    assert response.status_code == 504
    assert response.json()["error"] == "Audio processing timeout"
    assert response.json()["message"]
    assert tracker.in_flight == 0
    assert leftovers() == []


def test_audio_unreachable_backend_is_server_error(client, audio_stub, tracker) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    audio_stub.handler = handler

    response = client.post("/analyze-audio", files={"audio": ("clip.wav", b"RIFF", "audio/wav")})

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to process audio"
    assert tracker.in_flight == 0


@pytest.mark.asyncio
async def test_concurrent_audio_requests_release_counter(gateway, audio_stub, tracker, leftovers) -> None:
    observed: list[int] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        position = len(observed)
        observed.append(tracker.in_flight)
        await asyncio.sleep(0.05)
        if position % 3 == 2:
            return httpx.Response(200, json={"status": "failed"})
        return _audio_completed(request)

    audio_stub.handler = handler
    assert tracker.in_flight == 0

    transport = httpx.ASGITransport(app=gateway)
    async with httpx.AsyncClient(transport=transport, base_url="http://gateway.test") as client:
        responses = await asyncio.gather(
            *(
                client.post("/analyze-audio", files={"audio": (f"clip-{index}.wav", b"RIFF", "audio/wav")})
                for index in range(12)
            )
        )

    assert sorted({response.status_code for response in responses}) == [200, 500]
    assert len(observed) == 12
    assert max(observed) > 1
    assert tracker.in_flight == 0
    assert leftovers() == []
