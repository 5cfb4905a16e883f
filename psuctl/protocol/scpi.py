# psuctl/protocol/scpi.py
"""
SCPI verbs understood by the G30 LAN/RS-232 interface.
"""

IDN = "*IDN"
RESET = "*RST"
CLEAR_STATUS = "*CLS"

OUTPUT = "OUTP"
OUTPUT_ON = "ON"
OUTPUT_OFF = "OFF"

VOLTAGE = "VOLT"
CURRENT = "CURR"
OVP = "VOLT:PROT"

MEAS_VOLTAGE = "MEAS:VOLT"
MEAS_CURRENT = "MEAS:CURR"

STATUS_QUESTIONABLE = "STAT:QUES"
SYSTEM_ERROR = "SYST:ERR"

# STAT:QUES? bit positions (vendor-defined)
BIT_OVER_VOLTAGE = 0
BIT_OVER_CURRENT = 1
BIT_OVER_TEMPERATURE = 4
