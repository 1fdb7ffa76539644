"""CRC-16 checksums for ERT endpoint messages.

IDM packets protect the endpoint serial number with its own CRC. Running the
serial number and the transmitted CRC through the register yields a fixed
residue when both are intact.
"""

from __future__ import annotations

import binascii

from amrcollect._constants import IDM_CRC_INIT, IDM_CRC_RESIDUE


def crc16_ccitt(data: bytes, init: int = IDM_CRC_INIT) -> int:
    """CRC-16 with polynomial 0x1021, non-reflected, no final XOR.

    Parameters
    ----------
    data : bytes
        Bytes to checksum.
    init : int
        Initial register value.

    Returns
    -------
    int
        Final 16-bit register value.
    """
    return binascii.crc_hqx(data, init)


def check_idm_crc(endpoint_id: int, serial_checksum: int) -> bool:
    """Validate an IDM endpoint serial number against its CRC.

    Parameters
    ----------
    endpoint_id : int
        Unsigned 32-bit ERT serial number.
    serial_checksum : int
        Unsigned 16-bit ``SerialNumberCRC`` from the same packet.

    Returns
    -------
    bool
        ``True`` iff the 6-byte big-endian buffer ``endpoint_id || serial_checksum``
        produces the expected residue. Values outside their declared widths
        are never valid.
    """
    if not 0 <= endpoint_id <= 0xFFFFFFFF or not 0 <= serial_checksum <= 0xFFFF:
        return False
    buf = endpoint_id.to_bytes(4, "big") + serial_checksum.to_bytes(2, "big")
    return crc16_ccitt(buf) == IDM_CRC_RESIDUE
