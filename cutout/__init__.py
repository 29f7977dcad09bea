"""
Cutout Pipeline

Generates images with Ideogram, removes their backgrounds with Freepik and
publishes the results to S3.
"""
