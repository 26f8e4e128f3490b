import httpx

from pedidobot.data.assets import clean_folder, download_asset


def mock_client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def test_download_asset_writes_file(tmp_path):
    destination = tmp_path / "assets" / "catalogo.pdf"

    async with mock_client(lambda request: httpx.Response(200, content=b"%PDF-1.4")) as client:
        assert await download_asset(client, "https://example.com/catalogo.pdf", destination)

    assert destination.read_bytes() == b"%PDF-1.4"
    assert not (destination.parent / "catalogo.pdf.tmp").exists()


async def test_failed_download_keeps_previous_copy(tmp_path):
    destination = tmp_path / "qr.jpg"
    destination.write_bytes(b"old-qr")

    async with mock_client(lambda request: httpx.Response(503)) as client:
        assert not await download_asset(client, "https://example.com/qr.jpg", destination)

    assert destination.read_bytes() == b"old-qr"


def test_clean_folder_removes_files_only(tmp_path):
    folder = tmp_path / "maps"
    folder.mkdir()
    (folder / "map_1.png").write_bytes(b"1")
    (folder / "map_2.png").write_bytes(b"2")
    (folder / "keep").mkdir()

    assert clean_folder(folder) == 2
    assert [p.name for p in folder.iterdir()] == ["keep"]


def test_clean_folder_creates_missing_folder(tmp_path):
    folder = tmp_path / "media" / "maps"
    assert clean_folder(folder) == 0
    assert folder.is_dir()
