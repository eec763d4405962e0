"""
SMS sending example.

Demonstrates sending a templated SMS while printing every line exchanged
with the modem.
"""

from quicksms import SmsDeviceManager, SendError

# Replace with your serial port and recipient
PORT = "/dev/ttyUSB0"
BAUDRATE = 115200
RECIPIENT = "+1234567890"


def main():
    """Main function."""
    print("QuickSMS - Send SMS\n")

    manager = SmsDeviceManager()
    found = manager.scan(PORT, BAUDRATE)

    with manager.open(found.driver_id, PORT, BAUDRATE) as device:
        device.add_line_listener(print)

        template = "Test from {device} on {portName} ({baudRate}) at {time}, id {guid}"
        print(f"Content: {device.render_content(template)}\n")

        try:
            reference = device.send(RECIPIENT, template)
            print(f"\nSent, reference {reference}")
        except SendError as e:
            print(f"\nSend failed: {e}")


if __name__ == "__main__":
    main()
