"""
Cutout Processing Pipeline

Four sequential stages per invocation:
1. Decode - Optional base64, JSON request parse
2. Generation - Ideogram multipart request
3. Post-processing - Download, store, remove background, download, store
4. Assemble - JSON list of final storage URLs
"""
