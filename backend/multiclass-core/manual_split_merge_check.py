import json
import sys

import requests

from config import SERVICE_URL

# path to a merged submission file
FILE_PATH = sys.argv[1] if len(sys.argv) > 1 else "Main.java"

with open(FILE_PATH, "r", encoding="utf-8") as f:
    code = f.read()

# 1) merged file -> split files
split_resp = requests.post(f"{SERVICE_URL}/split", json={"code": code, "filename": FILE_PATH}, timeout=30)
split_resp.raise_for_status()
files = split_resp.json()["files"]

print("=== Split files ===")
for name, text in files.items():
    print(f"--- {name}")
    print(text)

# 2) split files -> merged file again
merge_resp = requests.post(f"{SERVICE_URL}/merge", json={"files": files}, timeout=30)
merge_data = merge_resp.json()

print("\n=== Merge result ===")
if merge_resp.ok:
    print(merge_data["code"])
    print(f"main class: {merge_data['main_class_name']}")
else:
    print(json.dumps(merge_data, indent=2))
