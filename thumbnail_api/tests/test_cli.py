"""Tests for CLI module."""

import os

import pytest

from conftest import URI, URI_HASH
from thumbnail_api.cli import create_parser, main


class TestCreateParser:
    """Tests for argument parser creation."""

    def test_key_command(self):
        parser = create_parser()
        args = parser.parse_args(['key', '--url', URI, '--size', '200'])

        assert args.command == 'key'
        assert args.url == URI
        assert args.size == 200

    def test_key_needs_url_or_id(self):
        """Test that --url and --id are mutually exclusive and one is required."""
        parser = create_parser()
        with pytest.raises(SystemExit):
            parser.parse_args(['key'])
        with pytest.raises(SystemExit):
            parser.parse_args(['key', '--url', URI, '--id', URI_HASH])

    def test_key_invalid_size(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(['key', '--id', URI_HASH, '--size', '300'])

    def test_upload_command(self):
        parser = create_parser()
        args = parser.parse_args(['upload', '--id', 'abcdef0123', 'logo.png', '--local-root', '/tmp/x'])

        assert args.command == 'upload'
        assert args.file == 'logo.png'
        assert args.storage == 'uploads'
        assert args.local_prefix == 'thumbnails'


class TestMain:
    """Tests for main entry point."""

    def test_no_command(self):
        assert main([]) == 1

    def test_key_for_url(self, capsys):
        assert main(['key', '--url', URI]) == 0

        assert capsys.readouterr().out.split() == [f'{URI_HASH}-LARGE', f'{URI_HASH}-MEDIUM']

    def test_key_for_id_and_size(self, capsys):
        assert main(['key', '--id', URI_HASH, '--size', '200']) == 0

        assert capsys.readouterr().out.strip() == f'{URI_HASH}-MEDIUM'

    def test_upload_local(self, tmp_path, sample_image_bytes):
        """Test uploading to a local storage."""
        image = tmp_path / 'logo.jpg'
        image.write_bytes(sample_image_bytes)
        root = tmp_path / 'storage'
        root.mkdir()

        result = main(['upload', '--id', 'abcdef0123', str(image), '--local-root', str(root)])

        assert result == 0
        assert sorted(os.listdir(root / 'thumbnails')) == [
            'abcdef0123-LARGE', 'abcdef0123-LARGE.meta', 'abcdef0123-MEDIUM', 'abcdef0123-MEDIUM.meta',
        ]

    def test_upload_missing_file(self, tmp_path):
        assert main(['upload', '--id', 'abcdef0123', str(tmp_path / 'missing.jpg'),
                     '--local-root', str(tmp_path)]) == 1

    def test_upload_invalid_image(self, tmp_path):
        image = tmp_path / 'logo.jpg'
        image.write_bytes(b'not an image')

        assert main(['upload', '--id', 'abcdef0123', str(image), '--local-root', str(tmp_path)]) == 1

    def test_upload_invalid_storage_config(self, tmp_path, monkeypatch, sample_image_bytes):
        """Test that an unconfigured S3 storage is reported instead of used."""
        for suffix in ('BUCKET', 'KEY', 'SECRET', 'REGION'):
            monkeypatch.delenv('UPLOADS_S3_' + suffix, raising=False)
        image = tmp_path / 'logo.jpg'
        image.write_bytes(sample_image_bytes)

        assert main(['upload', '--id', 'abcdef0123', str(image)]) == 1
