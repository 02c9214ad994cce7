"""Raw TCP printing to network label printers (port 9100)"""
import logging
import socket

from django.conf import settings

logger = logging.getLogger(__name__)


class PrinterError(Exception):
    """The printer could not be reached or refused the job"""


def send_zpl(host, port, payload, timeout=None):
    """
    Send a ZPL job and close the connection.

    Raises PrinterError with the underlying message when the printer cannot
    be reached.
    """
    if timeout is None:
        timeout = settings.LABEL_PRINTER_TIMEOUT
    port = int(port or settings.LABEL_PRINTER_DEFAULT_PORT)
    data = payload.encode('utf-8') if isinstance(payload, str) else payload

    try:
        with socket.create_connection((host, port), timeout=timeout) as connection:
            connection.sendall(data)
    except OSError as e:
        logger.error(f"Printer {host}:{port} failed: {str(e)}")
        raise PrinterError(f"Could not print to {host}:{port}: {str(e)}") from e

    logger.info(f"Sent {len(data)} bytes to printer {host}:{port}")
    return len(data)


def print_to(printer, payload):
    return send_zpl(printer.host, printer.port, payload)
