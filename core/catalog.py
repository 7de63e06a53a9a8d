"""Hebrew letter table and catalog building from picture file names."""

import logging
import os
import re

from .models import Catalog, PromptItem

logger = logging.getLogger(__name__)

# Transliterated letter name -> Hebrew character
HEBREW_LETTERS = {
    'aleph': 'א',
    'beth': 'ב',
    'gimel': 'ג',
    'daleth': 'ד',
    'he': 'ה',
    'vav': 'ו',
    'zayin': 'ז',
    'heth': 'ח',
    'teth': 'ט',
    'yod': 'י',
    'kaph': 'כ',
    'lamed': 'ל',
    'mem': 'מ',
    'nun': 'נ',
    'samekh': 'ס',
    'ayin': 'ע',
    'pe': 'פ',
    'tsadi': 'צ',
    'qoph': 'ק',
    'resh': 'ר',
    'shin': 'ש',
    'tav': 'ת'
}

HEBREW_CHAR_TO_NAME = {char: name for name, char in HEBREW_LETTERS.items()}

IMAGE_FILE_PATTERN = re.compile(r'^(.+?)\.(png|jpg|jpeg|gif|svg|webp)$', re.IGNORECASE)


def get_symbol_name(symbol: str) -> str:
    return HEBREW_CHAR_TO_NAME.get(symbol, '')


def build_catalog(image_paths: list[str], url_prefix: str = '/images/') -> Catalog:
    """Group picture files by the first letter of the word they are named after.

    Every known letter is present in the result, with an empty list if no
    picture starts with it. File names that are not images or do not start
    with a Hebrew letter are skipped.
    """
    catalog = {char: [] for char in HEBREW_LETTERS.values()}
    for path in image_paths:
        filename = os.path.basename(path)
        match = IMAGE_FILE_PATTERN.match(filename)
        if not match:
            logger.debug(f"Skipping {filename}: not an image")
            continue
        word = match.group(1)
        symbol = word[0]
        if symbol not in catalog:
            logger.debug(f"Skipping {filename}: does not start with a Hebrew letter")
            continue
        catalog[symbol].append(PromptItem(symbol, word, f"{url_prefix}{filename}"))
    return catalog


def load_catalog_dir(directory: str, url_prefix: str = '/images/') -> Catalog:
    """Build a catalog from the picture files in a directory."""
    if not os.path.isdir(directory):
        logger.warning(f"Images directory {directory} not found, catalog is empty")
        return build_catalog([], url_prefix)
    filenames = sorted(os.listdir(directory))
    catalog = build_catalog(filenames, url_prefix)
    logger.info(f"Loaded {sum(len(items) for items in catalog.values())} pictures from {directory}")
    return catalog


def available_symbols(catalog: Catalog) -> list[str]:
    """Symbols with at least one picture, in catalog order."""
    return [symbol for symbol, items in catalog.items() if items]
