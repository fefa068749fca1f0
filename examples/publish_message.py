#!/usr/bin/env python3
"""
Publish messages to a live ActiveMQ cluster.

Reads broker settings from the environment / .env (BROKER_HOSTS,
BROKER_USER, BROKER_PASSWORD, ...), resolves the master and publishes
each message given on the command line.

Usage:
    python examples/publish_message.py --queue test '{"x": 1}'
    python examples/publish_message.py -q test -c 10 '{"x": 1}'   # 10 copies, stop a broker mid-run
"""

import argparse
import sys
import time
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from queue_producer import QueueProducer, configure_logging, get_settings
from queue_producer.errors import BrokerResolutionError


def main() -> int:
    parser = argparse.ArgumentParser(
        description='Publish messages to an ActiveMQ queue with master failover'
    )
    parser.add_argument('messages', nargs='+', help='Message bodies to publish')
    parser.add_argument('--queue', '-q', required=True, help='Target queue name')
    parser.add_argument(
        '--count', '-c',
        type=int,
        default=1,
        help='Publish every message this many times'
    )
    parser.add_argument(
        '--interval', '-i',
        type=float,
        default=0.5,
        help='Seconds between publishes when --count > 1'
    )
    args = parser.parse_args()

    settings = get_settings()
    configure_logging(json_output=settings.LOG_JSON, log_level=settings.LOG_LEVEL)

    producer = QueueProducer.from_settings(settings)
    try:
        producer.initialize()
    except BrokerResolutionError as e:
        print(f"No active broker: {e}", file=sys.stderr)
        return 1

    failures = 0
    for n in range(args.count):
        for message in args.messages:
            result = producer.send(message, args.queue)
            print(f"[{n + 1}/{args.count}] {result.outcome.value} status={result.status_code} attempts={result.attempts}")
            if not result.success:
                failures += 1
        if n + 1 < args.count:
            time.sleep(args.interval)

    return 1 if failures else 0


if __name__ == '__main__':
    sys.exit(main())
