"""
Parse REST Client - Basic Usage Example

This example demonstrates sending requests and handling each error kind.
"""

import json
import logging
import sys

from parse_client import (
    ApplicationError,
    AuthError,
    ParseConfig,
    ParseError,
    TransportError,
    UnexpectedStatusError,
    create_dispatcher,
)


def fetch_scores():
    """Query a class and print the results."""
    print("=== Query Example ===\n")

    dispatcher = create_dispatcher(ParseConfig(
        application_id="example-app-id",
        api_key="example-rest-api-key",
        debug=True,
    ))
    dispatcher.session.enable_diagnostics(sys.stderr)

    try:
        response = dispatcher.send_simple("GET", "/classes/GameScore?limit=5")
        try:
            response.read()
            print(json.dumps(response.json(), indent=2))
        finally:
            response.close()
    except ApplicationError as e:
        print(f"Parse error {e.code}: {e.message}")
    except (AuthError, UnexpectedStatusError) as e:
        # These errors still hold the response
        print(f"HTTP {e.status_code}")
        e.close()
    except TransportError as e:
        print(f"Network failure (expected without real API): {e.message}")
    except ParseError as e:
        print(f"Error: {type(e).__name__}")
    finally:
        dispatcher.close()


def master_key_example():
    """Create an object with the master key."""
    print("\n=== Master Key Example ===\n")

    with create_dispatcher(ParseConfig(
        application_id="example-app-id",
        api_key="example-rest-api-key",
    )) as dispatcher:
        dispatcher.session.set_master_key("example-master-key")
        body = json.dumps({"score": 1337, "playerName": "Sean Plott"}).encode("utf-8")
        try:
            dispatcher.send_with_body("POST", "/classes/GameScore", body).close()
        except ParseError as e:
            print(f"Error (expected without real API): {type(e).__name__}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)
    fetch_scores()
    master_key_example()

    print("\nExamples completed!")
