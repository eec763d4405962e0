"""
CLI REPL (Read-Eval-Print Loop) for QuickSMS.

Provides an interactive modem terminal: scan a port, inspect status fields,
send SMS and raw commands.
"""

import shlex
import sys
import logging
from typing import Optional

from .config import SerialSettings
from .manager import SmsDeviceManager
from .device import SmsDevice
from .version import __version__
from .exceptions import SmsDeviceError
from .types import CommandEncoding, LineEvent

# Commands with a fixed argument list
ARGUMENTS = {
    "read": "<field>",
    "write": "<field> <value>",
    "send": "<number> <text>",
}


class QuickSmsCLI:
    """Interactive device REPL."""

    def __init__(
        self,
        port: str,
        baudrate: int = 115200,
        driver_id: Optional[str] = None,
        show_lines: bool = True,
        manager: Optional[SmsDeviceManager] = None
    ):
        """
        Initialize CLI.

        Args:
            port: Serial port path
            baudrate: Baud rate
            driver_id: Driver to use; scan the port when None
            show_lines: Print TX/RX lines as they happen
            manager: Device manager (default: bundled drivers)
        """
        self.port = port
        self.baudrate = baudrate
        self.driver_id = driver_id
        self.show_lines = show_lines
        self.manager = manager or SmsDeviceManager()
        self.device: Optional[SmsDevice] = None

    def _display_line(self, event: LineEvent) -> None:
        print(event)

    def run(self) -> int:
        """Run the REPL."""
        print(f"QuickSMS CLI v{__version__}")

        try:
            if self.driver_id is None:
                print(f"Scanning {self.port} at {self.baudrate} baud...")
                found = self.manager.scan(self.port, self.baudrate)
                print(f"Identified {found.name} ({found.driver_id})")
                self.driver_id = found.driver_id

            self.device = self.manager.open(self.driver_id, self.port, self.baudrate)
            if self.show_lines:
                self.device.add_line_listener(self._display_line)

            print(f"Connected to {self.device.name}. Type 'help' for commands, 'quit' to exit\n")

            # REPL loop
            while True:
                try:
                    line = input("> ").strip()

                    if not line:
                        continue

                    if line.lower() in ("quit", "exit", "q"):
                        break

                    self.handle(line)

                except KeyboardInterrupt:
                    print("\nUse 'quit' to exit")
                    continue
                except EOFError:
                    break

        except SmsDeviceError as e:
            print(f"\nError: {e}")
            return 1
        finally:
            if self.device:
                print("\nClosing connection...")
                self.device.close()
                print("Goodbye!")

        return 0

    def handle(self, line: str) -> None:
        """Run one REPL command; anything unrecognized is sent raw."""
        try:
            words = shlex.split(line)
        except ValueError:
            words = line.split()

        command = words[0].lower()
        args = words[1:]

        if command in ARGUMENTS and len(args) != len(ARGUMENTS[command].split()):
            print(f"Usage: {command} {ARGUMENTS[command]}")
            return
        if command == "hex" and not args:
            print("Usage: hex <text>")
            return

        try:
            if command == "help":
                self._print_help()
            elif command == "fields":
                self._show_fields()
            elif command == "status":
                self._show_status(refresh=True)
            elif command == "read":
                print(self.device.read_field(args[0]).display)
            elif command == "write":
                result = self.device.write_field(args[0], args[1])
                print("OK" if result.ok else result.display)
            elif command == "send":
                reference = self.device.send(args[0], args[1])
                print(f"Sent (reference {reference})")
            elif command == "hex":
                self.device.execute_command(" ".join(args), CommandEncoding.HEX)
            else:
                self.device.execute_command(line)
        except (SmsDeviceError, ValueError) as e:
            print(f"Error: {e}")

    def _print_help(self):
        """Print help message."""
        print("""
Available commands:
  fields                  - List status fields of the device
  status                  - Read and show all status fields
  read <field>            - Read one field (quote names with spaces)
  write <field> <value>   - Write one field
  send <number> <text>    - Send an SMS; text may use {device} {portName}
                            {baudRate} {time} {guid}
  hex <text>              - Send text as hex
  <command>               - Send anything else as-is (e.g., AT+CSQ)
  help                    - Show this help message
  quit/exit/q             - Exit CLI
        """)

    def _show_fields(self):
        for name in self.device.status_fields():
            status_field = self.device.driver.get_field(name)
            mode = ("r" if status_field.readable else "-") + ("w" if status_field.writable else "-")
            print(f"  {mode}  {name}")

    def _show_status(self, refresh: bool = False):
        results = self.device.read_all_fields() if refresh else self.device.status
        width = max((len(name) for name in results), default=0)
        for name, result in results.items():
            print(f"  {name:<{width}}  {result.display}")


def main():
    """Main entry point for CLI."""
    import argparse

    parser = argparse.ArgumentParser(
        description="QuickSMS CLI - Interactive SMS modem terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  quicksms-cli /dev/ttyUSB0
  quicksms-cli COM3 --baudrate 9600
  quicksms-cli /dev/ttyUSB2 --driver quectel_ec2x

Environment:
  QUICKSMS_PORT, QUICKSMS_BAUDRATE provide defaults for port and baud rate.
        """
    )

    parser.add_argument(
        "port",
        nargs="?",
        help="Serial port (e.g., /dev/ttyUSB0, COM3)"
    )
    parser.add_argument(
        "-b", "--baudrate",
        type=int,
        help="Baud rate (default: QUICKSMS_BAUDRATE or 115200)"
    )
    parser.add_argument(
        "-d", "--driver",
        help="Driver identifier; scan the port when omitted"
    )
    parser.add_argument(
        "--quiet-lines",
        action="store_true",
        help="Do not print TX/RX lines"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    args = parser.parse_args()

    try:
        defaults = SerialSettings.from_env(args.port, baudrate=args.baudrate)
    except ValueError as e:
        parser.error(str(e))

    # Setup logging
    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
    else:
        logging.basicConfig(
            level=logging.WARNING,
            format='%(levelname)s: %(message)s'
        )

    cli = QuickSmsCLI(
        port=defaults.port,
        baudrate=defaults.baudrate,
        driver_id=args.driver,
        show_lines=not args.quiet_lines,
        manager=SmsDeviceManager(defaults=defaults)
    )

    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
