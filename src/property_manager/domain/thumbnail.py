import io

from PIL import Image, ImageOps


def generate_thumbnail(image_bytes: bytes, max_size: int) -> bytes:
    """
    Downscale an image to fit a ``max_size`` square and encode it as JPEG.

    Raises PIL.UnidentifiedImageError (or OSError) when the bytes are not a
    readable image.
    """
    with Image.open(io.BytesIO(image_bytes)) as img:
        img = ImageOps.exif_transpose(img)
        img.thumbnail((max_size, max_size))
        if img.mode not in ("RGB", "L"):
            img = img.convert("RGB")

        out = io.BytesIO()
        img.save(out, format="JPEG", quality=85)
        return out.getvalue()
