import http.server
import os
import sys

with open(os.path.join(os.getcwd(), "argv.txt"), "w") as f:
    f.write(" ".join(sys.argv[1:]))

print("Starting ChromeDriver (fake) on port", sys.argv[1].split("=", 1)[1], flush=True)
print("Only local connections are allowed.", file=sys.stderr, flush=True)

if os.environ.get("FAKE_CHROMEDRIVER_EXIT"):
    sys.exit(int(os.environ["FAKE_CHROMEDRIVER_EXIT"]))

port = int(sys.argv[1].split("=", 1)[1])
http.server.HTTPServer(("127.0.0.1", port), http.server.BaseHTTPRequestHandler).serve_forever()
