from trafficwatch.media.exif import ExifResult, GeoCoordinate, extract_exif, extract_exif_from_path

__all__ = ["ExifResult", "GeoCoordinate", "extract_exif", "extract_exif_from_path"]
