# Aseprite frame extraction and sprite sheet assembly
