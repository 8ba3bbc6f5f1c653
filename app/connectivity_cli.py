"""
Dify Connectivity Check

Calls the Dify parameters endpoint and sends one chat message, printing the
status and body of each response. Useful when a workflow call fails and it
is unclear whether the key, the base URL or the workflow is at fault.

Usage:
    python connectivity_cli.py [--base-url URL] [--api-key KEY] [--query TEXT]
"""

import argparse
import json
import sys

import requests

from image_scoring.config import settings
from image_scoring.constants import CHAT_MESSAGES_PATH, PARAMETERS_PATH, RESPONSE_MODE_BLOCKING

DEFAULT_QUERY = "Hello, this is a test message"
DEFAULT_TEST_USER = "test-user"


def _print_response(label: str, response: requests.Response) -> bool:
    print(f"{label} status: {response.status_code}")
    if response.ok:
        try:
            print(json.dumps(response.json(), indent=2))
        except ValueError:
            print(response.text)
        print(f"OK: {label} succeeded")
        return True
    print(f"FAILED: {label} error: {response.text}")
    return False


def check_parameters(base_url: str, api_key: str, timeout: float = 30) -> bool:
    """GET the application parameters to verify the key and base URL."""
    response = requests.get(
        f"{base_url}{PARAMETERS_PATH}",
        headers={"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"},
        timeout=timeout,
    )
    return _print_response("Parameters", response)


def check_chat(base_url: str, api_key: str, query: str, user: str, timeout: float = 120) -> bool:
    """POST one blocking chat message."""
    response = requests.post(
        f"{base_url}{CHAT_MESSAGES_PATH}",
        headers={"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"},
        json={"inputs": {}, "query": query, "response_mode": RESPONSE_MODE_BLOCKING, "user": user},
        timeout=timeout,
    )
    return _print_response("Chat", response)


def run_checks(base_url: str, api_key: str, query: str, user: str) -> bool:
    base_url = base_url.rstrip("/")
    print("Testing Dify API connection...")
    print(f"API URL: {base_url}")
    print(f"API Key: {'Set (hidden)' if api_key else 'Not set'}")

    try:
        parameters_ok = check_parameters(base_url, api_key)
        print("\nTesting chat completion...")
        chat_ok = check_chat(base_url, api_key, query, user)
    except requests.RequestException as e:
        print(f"FAILED: Connection failed: {e}")
        return False

    return parameters_ok and chat_ok


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Check connectivity to the Dify API")
    parser.add_argument("--base-url", default=settings.dify.base_url, help="Dify API base URL")
    parser.add_argument("--api-key", default=settings.dify.api_key, help="Dify API key (defaults to DIFY_API_KEY)")
    parser.add_argument("--query", default=DEFAULT_QUERY, help="Chat message to send")
    parser.add_argument("--user", default=DEFAULT_TEST_USER, help="Caller tag sent with the chat message")
    args = parser.parse_args(argv)

    return 0 if run_checks(args.base_url, args.api_key, args.query, args.user) else 1


if __name__ == "__main__":
    sys.exit(main())
