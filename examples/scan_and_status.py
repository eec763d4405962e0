"""
Scan and status example.

Demonstrates identifying the modem on a port and reading its status fields.
"""

from quicksms import SmsDeviceManager, NoDriverMatchedError, ScanTimeoutError

# Replace with your serial port
PORT = "/dev/ttyUSB0"
BAUDRATE = 115200


def main():
    """Main function."""
    print("QuickSMS - Scan and Status\n")

    manager = SmsDeviceManager()

    try:
        found = manager.scan(PORT, BAUDRATE)
    except ScanTimeoutError:
        print(f"Nothing answered on {PORT}; check the cable and baud rate")
        return
    except NoDriverMatchedError:
        print(f"A device answered on {PORT} but no driver recognized it")
        return

    print(f"Found {found.name} ({found.driver_id})\n")

    with manager.open(found.driver_id, PORT, BAUDRATE) as device:
        results = device.read_all_fields()

        width = max(len(name) for name in results)
        for name, result in results.items():
            print(f"{name:<{width}}  {result.display}")


if __name__ == "__main__":
    main()
