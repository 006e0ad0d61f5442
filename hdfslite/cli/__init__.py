"""Command-line tool for hdfslite: cat, head, tail, checksum and completion."""