"""Unit tests for the px500 command line interface."""

from unittest.mock import patch

import pytest
from fake_api import json_lines, make_comment, make_photo

from px500.cli import build_parser, main, run


class TestParser:
    def test_photos_arguments(self):
        args = build_parser().parse_args(
            ["photos", "--feature", "popular", "--per-page", "10", "--max-pages", "2", "--tag", "sea"]
        )
        assert args.command == "photos"
        assert args.per_page == 10
        assert args.max_pages == 2
        assert args.tags == ["sea"]
        assert args.items is False

    def test_unknown_feature_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["photos", "--feature", "trending"])

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestRun:
    """Commands executed against the fake API."""

    @pytest.mark.asyncio
    async def test_photos_one_document_per_page(self, client, fake_api, capsys):
        fake_api.photo_pages = {1: [make_photo(1), make_photo(2)], 2: [make_photo(3)]}
        args = build_parser().parse_args(["photos", "--feature", "popular", "--max-pages", "2"])

        code = await run(args, client)

        documents = json_lines(capsys.readouterr().out)
        assert code == 0
        assert [d["page_number"] for d in documents] == [1, 2]
        assert [len(d["photos"]) for d in documents] == [2, 1]

    @pytest.mark.asyncio
    async def test_items_mode(self, client, fake_api, capsys):
        fake_api.comment_pages = {1: [make_comment(1), make_comment(2)]}
        args = build_parser().parse_args(["comments", "4910421", "--items", "--max-pages", "0"])

        code = await run(args, client)

        documents = json_lines(capsys.readouterr().out)
        assert code == 0
        assert [d["body"] for d in documents] == ["Comment 1", "Comment 2"]

    @pytest.mark.asyncio
    async def test_search(self, client, fake_api, capsys):
        fake_api.photo_pages = {1: [make_photo(1)]}
        args = build_parser().parse_args(["search", "--term", "dusk", "--license-type", "4"])

        code = await run(args, client)

        assert code == 0
        assert fake_api.requests[0].url.params["term"] == "dusk"
        assert fake_api.requests[0].url.params["license_type"] == "4"

    @pytest.mark.asyncio
    async def test_error_page_exit_code(self, client, fake_api, capsys):
        fake_api.failures = {1: (500, b"boom")}
        args = build_parser().parse_args(["photos", "--feature", "popular"])

        code = await run(args, client)

        assert code == 1
        assert "boom" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_photo(self, client, fake_api, capsys):
        fake_api.photos["12"] = make_photo(12)
        args = build_parser().parse_args(["photo", "12"])

        code = await run(args, client)

        assert code == 0
        assert json_lines(capsys.readouterr().out)[0]["id"] == 12

    @pytest.mark.asyncio
    async def test_photo_not_found(self, client, capsys):
        code = await run(build_parser().parse_args(["photo", "404"]), client)

        assert code == 1
        assert "404 Not Found" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_upload(self, client, fake_api, tmp_path, capsys):
        image = tmp_path / "harbour.jpg"
        image.write_bytes(b"\xff\xd8jpeg-bytes")
        args = build_parser().parse_args(["upload", str(image), "--title", "Harbour", "--private"])

        code = await run(args, client)

        assert code == 0
        sent = fake_api.requests[0]
        assert sent.url.params["name"] == "Harbour"
        assert sent.url.params["privacy"] == "true"
        assert b'filename="harbour.jpg"' in sent.content
        assert json_lines(capsys.readouterr().out)[0]["title"] == "Harbour"

    @pytest.mark.asyncio
    async def test_upload_tags(self, client, fake_api, tmp_path, capsys):
        image = tmp_path / "sea.jpg"
        image.write_bytes(b"jpeg")
        args = build_parser().parse_args(["upload", str(image), "--tag", "sea", "--tag", "evening"])

        assert await run(args, client) == 0

        assert fake_api.requests[0].url.params.get_list("tags") == ["sea", "evening"]
        assert json_lines(capsys.readouterr().out)[0]["tags"] == ["sea", "evening"]

    @pytest.mark.asyncio
    async def test_upload_missing_file(self, client, tmp_path, capsys):
        args = build_parser().parse_args(["upload", str(tmp_path / "nope.jpg")])

        assert await run(args, client) == 1
        assert "Error:" in capsys.readouterr().err


class TestMain:
    """Exit codes of the console entry point."""

    def test_missing_consumer_key_exits_1(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["photo", "1"])

        assert exc_info.value.code == 1
        assert "consumer key" in capsys.readouterr().err

    def test_keyboard_interrupt_exits_130(self, monkeypatch):
        monkeypatch.setenv("PX500_CONSUMER_KEY", "k")

        def interrupted(coro):
            coro.close()
            raise KeyboardInterrupt

        with patch("px500.cli.asyncio.run", side_effect=interrupted):
            with pytest.raises(SystemExit) as exc_info:
                main(["photo", "1"])

        assert exc_info.value.code == 130
