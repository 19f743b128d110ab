"""End-to-end tests of the upload -> process -> download -> cleanup flow."""

import io
import os
import shutil
import subprocess
import time
import uuid
import zipfile

import pytest
from aiohttp import FormData

from vtrim.config.models import StorageConfig, TrimConfig, TrimPolicy, VTrimConfig
from vtrim.executor.trim import FFmpegTrimExecutor
from vtrim.introspector.ffprobe import FFprobeProbe
from vtrim.introspector.stub import StubProbe
from vtrim.server.app import create_app
from vtrim.trim.planner import TrimWindow

pytestmark = pytest.mark.integration

HAS_FFMPEG = shutil.which("ffmpeg") is not None and shutil.which("ffprobe") is not None


def _form(files: dict[str, bytes]) -> FormData:
    form = FormData()
    for name, data in files.items():
        form.add_field("videos", data, filename=name, content_type="video/mp4")
    return form


async def _run_flow(client, files: dict[str, bytes], **cuts) -> tuple[str, dict]:
    resp = await client.post("/api/upload", data=_form(files))
    assert resp.status == 200
    uploaded = await resp.json()

    resp = await client.post(
        "/api/process",
        json={"sessionId": uploaded["sessionId"], "files": uploaded["files"], **cuts},
    )
    assert resp.status == 200
    return uploaded["sessionId"], await resp.json()


class TestPipelineWithStubs:
    """Full HTTP flow with a scripted probe and fake engine."""

    @pytest.mark.asyncio
    async def test_trim_zip_cleanup(self, aiohttp_client, store, fake_engine) -> None:
        probe = StubProbe(default=10.0)
        config = VTrimConfig(storage=StorageConfig(root=store.root))
        client = await aiohttp_client(
            create_app(config, store=store, probe=probe, engine=fake_engine)
        )

        sid, body = await _run_flow(
            client, {"clip.mp4": b"0123456789"}, trimStart=1, trimEnd=1
        )

        assert [f["fileName"] for f in body["files"]] == ["trimmed_1.mp4"]
        window = fake_engine.calls[0][2]
        assert window.duration == pytest.approx(8.0)

        resp = await client.post("/api/v1/create-zip", json={"sessionId": sid})
        zip_url = (await resp.json())["zipUrl"]
        resp = await client.get(zip_url)
        with zipfile.ZipFile(io.BytesIO(await resp.read())) as zf:
            assert zf.namelist() == ["trimmed_1.mp4"]

        resp = await client.delete(f"/api/cleanup/{sid}")
        assert resp.status == 200
        resp = await client.get(body["files"][0]["url"])
        assert resp.status == 404
        resp = await client.get(zip_url)
        assert resp.status == 404

    @pytest.mark.asyncio
    async def test_short_video_returns_empty_list(
        self, aiohttp_client, store, fake_engine
    ) -> None:
        config = VTrimConfig(storage=StorageConfig(root=store.root))
        client = await aiohttp_client(
            create_app(config, store=store, probe=StubProbe(default=0.5), engine=fake_engine)
        )

        _, body = await _run_flow(client, {"tiny.mp4": b"x"}, trimStart=1, trimEnd=1)

        assert body["files"] == []

    @pytest.mark.asyncio
    async def test_startup_prunes_expired_sessions(
        self, aiohttp_client, store, fake_engine
    ) -> None:
        stale = store.create_session()
        old = time.time() - 48 * 3600
        for path in (store.upload_dir(stale), store.resolve_session_dir(stale)):
            os.utime(path, (old, old))
        orphan = store.output_root / str(uuid.uuid4()) / ".vtrim_temp_trimmed_1.mp4"
        orphan.parent.mkdir(parents=True)
        orphan.write_bytes(b"partial")
        os.utime(orphan, (old, old))

        config = VTrimConfig(storage=StorageConfig(root=store.root))
        await aiohttp_client(
            create_app(config, store=store, probe=StubProbe(), engine=fake_engine)
        )

        assert not store.session_exists(stale)
        assert not orphan.exists()


def _make_video(path, seconds: int) -> None:
    subprocess.run(
        [
            "ffmpeg",
            "-hide_banner",
            "-loglevel",
            "error",
            "-f",
            "lavfi",
            "-i",
            f"testsrc=duration={seconds}:size=160x120:rate=25",
            "-f",
            "lavfi",
            "-i",
            f"sine=frequency=440:duration={seconds}",
            "-c:v",
            "libx264",
            "-g",
            "25",
            "-c:a",
            "aac",
            "-shortest",
            str(path),
        ],
        check=True,
        timeout=120,
    )


@pytest.mark.skipif(not HAS_FFMPEG, reason="ffmpeg/ffprobe not installed")
class TestPipelineWithFFmpeg:
    """Full HTTP flow against the real ffmpeg tools."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("policy", [TrimPolicy.COPY, TrimPolicy.REENCODE])
    async def test_real_trim(self, aiohttp_client, store, temp_dir, policy) -> None:
        source = temp_dir / "source.mp4"
        _make_video(source, 6)
        config = VTrimConfig(
            storage=StorageConfig(root=store.root), trim=TrimConfig(policy=policy)
        )
        probe = FFprobeProbe.from_config(config)
        client = await aiohttp_client(
            create_app(
                config,
                store=store,
                probe=probe,
                engine=FFmpegTrimExecutor.from_config(config),
            )
        )

        sid, body = await _run_flow(
            client, {"source.mp4": source.read_bytes()}, trimStart=1, trimEnd=2
        )

        assert [f["fileName"] for f in body["files"]] == ["trimmed_1.mp4"]
        output = store.resolve_output_file(sid, "trimmed_1.mp4")
        # copy mode snaps to keyframes, one per second here
        assert probe.get_duration(output) == pytest.approx(3.0, abs=1.1)


def _has_encoders(*names: str) -> bool:
    if not HAS_FFMPEG:
        return False
    listing = subprocess.run(
        ["ffmpeg", "-hide_banner", "-encoders"],
        capture_output=True,
        text=True,
        timeout=30,
    ).stdout
    return all(f" {name} " in listing for name in names)


@pytest.mark.skipif(
    not _has_encoders("libvpx-vp9", "libopus"), reason="ffmpeg lacks VP9/Opus"
)
class TestWebmReencode:
    """Re-encoding keeps WebM outputs playable."""

    def test_reencode_webm(self, temp_dir) -> None:
        source = temp_dir / "clip.webm"
        subprocess.run(
            [
                "ffmpeg",
                "-hide_banner",
                "-loglevel",
                "error",
                "-f",
                "lavfi",
                "-i",
                "testsrc=duration=4:size=160x120:rate=25",
                "-f",
                "lavfi",
                "-i",
                "sine=frequency=440:duration=4",
                "-c:v",
                "libvpx-vp9",
                "-c:a",
                "libopus",
                "-shortest",
                str(source),
            ],
            check=True,
            timeout=120,
        )
        config = VTrimConfig(trim=TrimConfig(policy=TrimPolicy.REENCODE))
        output = temp_dir / "trimmed_1.webm"

        FFmpegTrimExecutor.from_config(config).execute(
            source, output, TrimWindow(start=1.0, end=3.0)
        )

        assert FFprobeProbe.from_config(config).get_duration(output) == pytest.approx(
            2.0, abs=0.5
        )
