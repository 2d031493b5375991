# FILE: deploy.py
# USAGE: python deploy.py -l LOGIN -a APIKEY -d SUBDOMAIN -n CODE -f FOLDER [--update]
#        python deploy.py -l LOGIN -a APIKEY -d SUBDOMAIN -n CODE --delete

import argparse
import os
import sys

import requests

import amo_client
from archive import build_archive
from errors import ArgumentError, VendorApiError, WidgetDeployError
from manifest import update_manifest

# --- CONFIGURATION ---
# Credentials can also come from the environment; command line flags win.
LOGIN_ENV = 'AMO_LOGIN'
APIKEY_ENV = 'AMO_APIKEY'
SUBDOMAIN_ENV = 'AMO_SUBDOMAIN'
# ---------------------


def build_parser():
    parser = argparse.ArgumentParser(
        prog='amo-widget-deploy',
        description="Register, package and upload an amoCRM widget.",
    )
    parser.add_argument('-l', '--login', default=os.getenv(LOGIN_ENV), help="Account login")
    parser.add_argument('-a', '--apikey', default=os.getenv(APIKEY_ENV), help="API key")
    parser.add_argument('-d', '--subdomain', default=os.getenv(SUBDOMAIN_ENV), help="Account subdomain")
    parser.add_argument('-n', '--name', required=True, help="Widget code")
    parser.add_argument('-f', '--folder', help="Folder with the widget files")
    parser.add_argument('--update', action='store_true', help="Update an existing widget")
    parser.add_argument('--delete', action='store_true', help="Delete an existing widget")
    return parser


def validate_args(args):
    missing = [flag for flag, value in (('--login', args.login),
                                        ('--apikey', args.apikey),
                                        ('--subdomain', args.subdomain)) if not value]
    if missing:
        raise ArgumentError(f"Missing required argument(s): {', '.join(missing)}")
    if args.update and args.delete:
        raise ArgumentError("--update and --delete cannot be used together.")
    if not args.delete and not args.folder:
        raise ArgumentError("Widget folder is not set, use -f/--folder.")


def run(args):
    """Runs one deploy (or delete) and returns the process exit code."""
    validate_args(args)

    # 1. Authenticate
    print(f"Authenticating as {args.login} on {args.subdomain}...")
    session = amo_client.authenticate(args.subdomain, args.login, args.apikey)

    # 2. Resolve the widget identity
    identity = session.find_widget(args.name)

    if identity is None:
        if args.delete:
            raise VendorApiError(f"Cannot delete widget {args.name}: no such widget.")
        identity = session.create_widget(args.name)
        print(f"Created widget {identity.code} with secret key {identity.secret_key}.")
    else:
        if args.delete:
            session.delete_widget(identity)
            print(f"Deleted widget {identity.code} with secret key {identity.secret_key}.")
            return 0
        if not args.update:
            print(f"Widget {identity.code} already exists, pass --update to overwrite it.")
            return 0
        print(f"Found widget {identity.code} with secret key {identity.secret_key}.")

    # 3. Rewrite the manifest, 4. pack, 5. upload
    update_manifest(args.folder, identity)
    archive_path = build_archive(args.folder)
    session.upload_widget(archive_path, identity)

    print(f"\n✅ Widget {identity.code} uploaded successfully.")
    return 0


def main(argv=None):
    args = build_parser().parse_args(argv)
    try:
        return run(args)
    except WidgetDeployError as e:
        print(f"FATAL: {e}", file=sys.stderr)
        return 1
    except requests.exceptions.HTTPError as e:
        status = e.response.status_code if e.response is not None else 'unknown'
        print(f"FATAL: API request failed with status code {status}.", file=sys.stderr)
        return 1
    except requests.exceptions.RequestException as e:
        print(f"FATAL: A network error occurred: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
