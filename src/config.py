# one address per line, "#" starts a comment
ALLOWLIST_FILE = "allowlist.txt"

# proofs for the minting front-end: {"root": ..., "proofs": {address: [...]}}
PROOFS_FILE = "output/proofs.json"
