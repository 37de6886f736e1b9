# output formats for roots and proofs, hex is what the deploy script takes
ENCODINGS = ("hex", "base64")
