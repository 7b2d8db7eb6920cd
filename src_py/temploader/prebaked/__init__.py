from temploader.prebaked.collaborators import ParsedContent
from temploader.prebaked.collaborators import expand_glob
from temploader.prebaked.collaborators import parse_front_matter
from temploader.prebaked.collaborators import read_file

__all__ = [
    'ParsedContent',
    'expand_glob',
    'parse_front_matter',
    'read_file',
]
