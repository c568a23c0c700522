# JTIs of signed-out tokens. Process local, so it resets on restart and is not
# shared between gunicorn workers.
BLOCKLIST = set()
