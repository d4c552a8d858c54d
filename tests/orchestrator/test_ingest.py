from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from preset_catalog.config import ManifestEntry, ManifestError
from preset_catalog.engine import Fetcher, ModEntry
from preset_catalog.orchestrator import Orchestrator


def run_ingest(config, transport, logger, manifest):
    async def run():
        async with Fetcher(config, transport=transport, logger=logger) as fetcher:
            orchestrator = Orchestrator(config, fetcher, logger=logger)
            presets = await orchestrator.ingest(manifest)
            return presets, orchestrator.summary

    return asyncio.run(run())


def test_required_and_optional_merge_into_one_preset(catalog_config, make_transport, recording_logger, docs) -> None:
    transport = make_transport(
        {
            "a.html": docs.preset_document("Foo", [docs.mod_row("CBA", "L1")]),
            "a_opt.html": docs.preset_document(None, [docs.mod_row("ACE", "L2")]),
        }
    )
    manifest = [ManifestEntry(required="a.html", optional="a_opt.html")]
    presets, summary = run_ingest(catalog_config, transport, recording_logger, manifest)

    assert len(presets) == 1
    preset = presets[0]
    assert preset.identifier == "a.html"
    assert preset.display_name == "Foo"
    assert preset.mods.dlc == ()
    assert preset.mods.required == (ModEntry("CBA", "L1"),)
    assert preset.mods.optional == (ModEntry("ACE", "L2"),)
    assert summary == {"success": 2, "failed": 0}


def test_failed_document_does_not_abort_others(catalog_config, make_transport, recording_logger, docs) -> None:
    transport = make_transport(
        {
            "a.html": 500,
            "b.html": docs.preset_document("Bar", [docs.mod_row("CBA", "L1")]),
        }
    )
    manifest = [ManifestEntry(required="a.html"), ManifestEntry(required="b.html")]
    presets, summary = run_ingest(catalog_config, transport, recording_logger, manifest)

    assert [p.display_name for p in presets] == ["Bar"]
    assert summary == {"success": 1, "failed": 1}
    failures = recording_logger.named("document_failed")
    assert len(failures) == 1
    assert failures[0]["reference"] == "a.html"
    assert failures[0]["index"] == 0


def test_failures_plus_successes_equal_populated_references(catalog_config, make_transport, recording_logger, docs) -> None:
    transport = make_transport(
        {
            "a.html": docs.preset_document("A", []),
            "b_opt.html": 404,
            "c.html": docs.preset_document("C", []),
        }
    )
    manifest = [
        ManifestEntry(required="a.html", optional="missing.html"),
        ManifestEntry(optional="b_opt.html"),
        ManifestEntry(),
        ManifestEntry(required="c.html", optional=""),
    ]
    presets, summary = run_ingest(catalog_config, transport, recording_logger, manifest)

    assert summary["success"] + summary["failed"] == 4
    assert summary["failed"] == len(recording_logger.named("document_failed")) == 2
    assert [p.identifier for p in presets] == ["a.html", "c.html"]
    complete = recording_logger.named("ingest_complete")
    assert complete == [{"documents": 4, "succeeded": 2, "failed": 2, "presets": 2}]


def test_keep_gaps_preserves_manifest_positions(catalog_config, make_transport, recording_logger, docs) -> None:
    config = catalog_config.model_copy(update={"keep_gaps": True})
    transport = make_transport({"c.html": docs.preset_document("C", [])})
    manifest = [ManifestEntry(required="a.html"), ManifestEntry(), ManifestEntry(required="c.html")]
    presets, _summary = run_ingest(config, transport, recording_logger, manifest)

    assert presets[0] is None
    assert presets[1] is None
    assert presets[2].display_name == "C"


def test_identity_comes_from_required_regardless_of_arrival(catalog_config, recording_logger, docs) -> None:
    documents = {
        "a.html": docs.preset_document("Foo", [docs.mod_row("CBA", "L1")]),
        "a_opt.html": docs.preset_document("Optional title", [docs.mod_row("ACE", "L2")]),
    }

    async def handler(request: httpx.Request) -> httpx.Response:
        name = request.url.path.rsplit("/", 1)[-1]
        # let the optional document arrive first
        if name == "a.html":
            await asyncio.sleep(0.05)
        return httpx.Response(200, text=documents[name])

    manifest = [ManifestEntry(required="a.html", optional="a_opt.html")]
    presets, _summary = run_ingest(catalog_config, httpx.MockTransport(handler), recording_logger, manifest)

    assert presets[0].identifier == "a.html"
    assert presets[0].display_name == "Foo"
    assert presets[0].mods.optional == (ModEntry("ACE", "L2"),)


def test_load_catalog_reads_manifest(catalog_config, make_transport, recording_logger, docs) -> None:
    transport = make_transport(
        {
            "presets.json": json.dumps([{"required": "a.html", "optional": ""}]),
            "a.html": docs.preset_document("Foo", []),
        }
    )

    async def run():
        async with Fetcher(catalog_config, transport=transport, logger=recording_logger) as fetcher:
            return await Orchestrator(catalog_config, fetcher, logger=recording_logger).load_catalog()

    presets = asyncio.run(run())
    assert [p.display_name for p in presets] == ["Foo"]


@pytest.mark.parametrize("payload", ["{not json", json.dumps({"required": "a.html"}), 404])
def test_unusable_manifest_is_fatal(catalog_config, make_transport, recording_logger, payload) -> None:
    transport = make_transport({"presets.json": payload})

    async def run():
        async with Fetcher(catalog_config, transport=transport, logger=recording_logger) as fetcher:
            return await Orchestrator(catalog_config, fetcher, logger=recording_logger).load_catalog()

    with pytest.raises(ManifestError):
        asyncio.run(run())


def test_last_updated_formats_commit_date(catalog_config, recording_logger) -> None:
    config = catalog_config.model_copy(update={"commits_api_url": "https://api.example/commits"})
    commits = [{"commit": {"committer": {"date": "2024-03-01T12:34:56Z"}}}]
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=commits))

    async def run():
        async with Fetcher(config, transport=transport, logger=recording_logger) as fetcher:
            return await Orchestrator(config, fetcher, logger=recording_logger).last_updated()

    assert asyncio.run(run()) == "2024-03-01 12:34:56"


def test_last_updated_failure_is_logged(catalog_config, recording_logger) -> None:
    config = catalog_config.model_copy(update={"commits_api_url": "https://api.example/commits"})
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=[]))

    async def run():
        async with Fetcher(config, transport=transport, logger=recording_logger) as fetcher:
            return await Orchestrator(config, fetcher, logger=recording_logger).last_updated()

    assert asyncio.run(run()) is None
    assert len(recording_logger.named("last_updated_failed")) == 1


def test_fan_out_is_not_capped_by_connection_pool(catalog_config, recording_logger, docs, monkeypatch) -> None:
    for name in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy"):
        monkeypatch.delenv(name, raising=False)
    total = 150
    body = docs.preset_document("P", [docs.mod_row("CBA", "L1")]).encode("utf-8")
    state = {"in_flight": 0, "peak": 0}

    async def run():
        all_arrived = asyncio.Event()

        async def handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
            await reader.readuntil(b"\r\n\r\n")
            state["in_flight"] += 1
            state["peak"] = max(state["peak"], state["in_flight"])
            if state["in_flight"] >= total:
                all_arrived.set()
            try:
                # hold every response until the whole manifest is in flight
                await asyncio.wait_for(all_arrived.wait(), timeout=3.0)
            except asyncio.TimeoutError:
                pass
            writer.write(
                b"HTTP/1.1 200 OK\r\nContent-Type: text/html\r\nConnection: close\r\n"
                + f"Content-Length: {len(body)}\r\n\r\n".encode("ascii")
                + body
            )
            await writer.drain()
            state["in_flight"] -= 1
            writer.close()

        server = await asyncio.start_server(handle, "127.0.0.1", 0, backlog=total * 2)
        port = server.sockets[0].getsockname()[1]
        config = catalog_config.model_copy(
            update={"base_url": f"http://127.0.0.1:{port}/", "request_timeout": 2.0}
        )
        manifest = [ManifestEntry(required=f"p{index}.html") for index in range(total)]
        try:
            async with Fetcher(config, logger=recording_logger) as fetcher:
                orchestrator = Orchestrator(config, fetcher, logger=recording_logger)
                presets = await orchestrator.ingest(manifest)
                return presets, orchestrator.summary
        finally:
            server.close()
            await server.wait_closed()

    presets, summary = asyncio.run(run())
    assert state["peak"] == total
    assert summary == {"success": total, "failed": 0}
    assert len(presets) == total


def test_document_failure_logs_underlying_cause(catalog_config, make_transport, recording_logger, docs) -> None:
    transport = make_transport({"a.html": 503})
    _presets, _summary = run_ingest(catalog_config, transport, recording_logger, [ManifestEntry(required="a.html")])

    failure = recording_logger.named("document_failed")[0]
    assert "Fetch failed after 1 attempts" in failure["error"]
    assert failure["cause"] == repr(RuntimeError("Unexpected status 503"))
