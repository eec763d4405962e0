"""
Raw command example.

Demonstrates sending commands as text or hex on a background worker and
watching the replies through line events.
"""

from quicksms import CommandEncoding, DeviceWorker, SmsDeviceManager

# Replace with your serial port and driver
PORT = "/dev/ttyUSB0"
DRIVER = "generic"


def on_received(line, timestamp):
    """Handle a line from the modem."""
    print(f"{timestamp:%H:%M:%S} << {line}")


def main():
    """Main function."""
    print("QuickSMS - Raw Terminal (empty line to quit, prefix hex: to send as hex)\n")

    device = SmsDeviceManager().open(DRIVER, PORT)
    device.on_received(on_received)

    with DeviceWorker(device) as worker:
        while True:
            line = input("> ").strip()
            if not line:
                break

            if line.startswith("hex:"):
                future = worker.execute_command(line[4:], CommandEncoding.HEX)
            else:
                future = worker.execute_command(line)
            future.result()


if __name__ == "__main__":
    main()
