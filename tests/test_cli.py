"""Tests for the docsgen command line."""

import os
from unittest.mock import patch

import pytest

import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from docsgen_pkg.cli import build_parser, main
from docsgen_pkg.client import DocumentFetchError


@pytest.fixture(autouse=True)
def isolated_cwd(temp_dir, monkeypatch):
    monkeypatch.chdir(temp_dir)
    monkeypatch.delenv('ROOT_DOC_ID', raising=False)
    monkeypatch.delenv('GOOGLE_ACCESS_TOKEN', raising=False)
    return temp_dir


class TestCli:
    """Test cases for main()."""

    def test_parser_flags(self):
        """Test argument parsing."""
        args = build_parser().parse_args(['--root-doc-id', 'R', '--doc-hosts', 'a.com'])
        assert args.root_doc_id == 'R'
        assert args.doc_hosts == 'a.com'
        assert args.output is None

    def test_missing_root_document(self, capsys):
        """Test exit code when no root document id is given."""
        with pytest.raises(SystemExit) as exc_info:
            main(['--access-token', 'T'])
        assert exc_info.value.code == 1
        assert 'root document id' in capsys.readouterr().err

    def test_missing_access_token(self, capsys):
        """Test exit code when no access token is given."""
        with pytest.raises(SystemExit) as exc_info:
            main(['--root-doc-id', 'R'])
        assert exc_info.value.code == 1
        assert 'access token' in capsys.readouterr().err

    @patch('docsgen_pkg.cli.Docsgen')
    @patch('docsgen_pkg.cli.DocsClient')
    def test_build(self, mock_client_cls, mock_docsgen_cls):
        """Test that CLI options reach the generator and the build runs."""
        main(['--root-doc-id', 'R', '--access-token', 'T', '--output', 'site',
              '--doc-hosts', 'a.example.com, b.example.com', '--site-title', 'Docs'])

        mock_client_cls.assert_called_once_with('T')
        args, kwargs = mock_docsgen_cls.call_args
        assert args == (mock_client_cls.return_value, 'R')
        assert kwargs['output_dir'] == 'site'
        assert kwargs['doc_hosts'] == ['a.example.com', 'b.example.com']
        assert kwargs['site_title'] == 'Docs'
        assert kwargs['static_dir'] == 'static'
        mock_docsgen_cls.return_value.build.assert_called_once()
        mock_client_cls.return_value.close.assert_called_once()

    @patch('docsgen_pkg.cli.Docsgen')
    @patch('docsgen_pkg.cli.DocsClient')
    def test_environment_settings(self, mock_client_cls, mock_docsgen_cls, monkeypatch):
        """Test root id and token taken from the environment."""
        monkeypatch.setenv('ROOT_DOC_ID', 'env-root')
        monkeypatch.setenv('GOOGLE_ACCESS_TOKEN', 'env-token')
        main([])
        mock_client_cls.assert_called_once_with('env-token')
        assert mock_docsgen_cls.call_args[0][1] == 'env-root'

    @patch('docsgen_pkg.cli.Docsgen')
    @patch('docsgen_pkg.cli.DocsClient')
    def test_fetch_error_exits(self, mock_client_cls, mock_docsgen_cls, capsys):
        """Test that a fetch error exits with code 1 and closes the client."""
        mock_docsgen_cls.return_value.build.side_effect = DocumentFetchError("docs fetch error for X: 404")
        with pytest.raises(SystemExit) as exc_info:
            main(['--root-doc-id', 'R', '--access-token', 'T'])
        assert exc_info.value.code == 1
        assert 'docs fetch error for X' in capsys.readouterr().err
        mock_client_cls.return_value.close.assert_called_once()

    def test_init_creates_config(self, isolated_cwd, capsys):
        """Test --init writes a sample configuration."""
        main(['--init', 'yml'])
        assert os.path.isfile(os.path.join(isolated_cwd, 'docsgen.yml'))
        assert 'Created sample configuration file' in capsys.readouterr().out

    def test_version(self, capsys):
        """Test --version output."""
        with pytest.raises(SystemExit) as exc_info:
            main(['--version'])
        assert exc_info.value.code == 0
        assert '1.0.0' in capsys.readouterr().out
