#!/usr/bin/env python3
"""
Command-line interface for Docsgen.
"""

import argparse
import os
import sys

from .client import DocsClient, DocumentFetchError
from .core import Docsgen
from .settings import DocsgenSettings


def build_parser():
    parser = argparse.ArgumentParser(description='Docsgen - publish a linked document tree as a static site')
    parser.add_argument('--output', type=str,
                        help='Output directory for generated site')
    parser.add_argument('--static', type=str,
                        help='Static assets directory to copy to <output>/static')
    parser.add_argument('--templates', type=str,
                        help='Templates directory containing page.html')
    parser.add_argument('--root-doc-id', type=str,
                        help='Id of the document rendered as the site index')
    parser.add_argument('--access-token', type=str,
                        help='OAuth access token for the document service')
    parser.add_argument('--doc-hosts', type=str,
                        help='Comma-separated hosts whose document links are rewritten')
    parser.add_argument('--log-dir', type=str,
                        help='Directory for build log files')
    parser.add_argument('--site-title', type=str, help='Site title for page metadata')
    parser.add_argument('--init', type=str, choices=['yml', 'yaml', 'json'],
                        help='Create a sample configuration file')
    parser.add_argument('--version', action='version', version='%(prog)s 1.0.0')
    return parser


def main(argv=None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    settings_loader = DocsgenSettings()

    if args.init:
        config_path = settings_loader.create_sample_config(args.init)
        print(f"Created sample configuration file: {config_path}")
        return

    settings_loader.load_settings()
    args_dict = {k: v for k, v in vars(args).items() if v is not None and k != 'init'}
    final_settings = settings_loader.merge_with_args(args_dict)

    if not final_settings['root_doc_id']:
        print("Error: no root document id (use --root-doc-id or ROOT_DOC_ID)", file=sys.stderr)
        sys.exit(1)
    if not final_settings['access_token']:
        print("Error: no access token (use --access-token or GOOGLE_ACCESS_TOKEN)", file=sys.stderr)
        sys.exit(1)

    output_dir = os.path.expanduser(final_settings['output'])

    client = DocsClient(final_settings['access_token'])
    try:
        generator = Docsgen(
            client,
            final_settings['root_doc_id'],
            output_dir=output_dir,
            static_dir=final_settings['static'],
            templates_dir=final_settings['templates'],
            doc_hosts=final_settings['doc_hosts'],
            log_dir=final_settings['log_dir'],
            site_title=final_settings['site_title'],
        )
        generator.build()
    except DocumentFetchError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        client.close()


if __name__ == '__main__':
    main()
