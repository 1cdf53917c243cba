"""
Render map item files of a voxel-world game to images, and stitch many of
them together into one large mosaic.
"""
