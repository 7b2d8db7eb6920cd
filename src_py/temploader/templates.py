from __future__ import annotations

import os
import posixpath
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from dataclasses import fields
from typing import Annotated
from typing import Any

from docnote import ClcNote


@dataclass(slots=True)
class NormalizedTemplate:
    """The canonical, uniformly-shaped record produced by the loading
    pipeline, regardless of which input shape the template came from.

    Templates are owned by the cache of whatever loader produced them,
    but they're still mutable: ``on_load`` hooks are explicitly allowed
    to enrich them in place before they're cached.
    """
    path: str
    content: Annotated[
        str | None,
        ClcNote(
            '''The template body. ``None`` indicates that the template
            was backed by a file that doesn't exist or couldn't be read;
            this is not an error.
            ''')]
    ext: str | None = None
    data: Annotated[
        Mapping[str, Any] | None,
        ClcNote(
            '''Metadata parsed from front matter. This is protected:
            flattening never moves anything into or out of it.
            ''')] = None
    locals: dict[str, Any] | None = None
    options: dict[str, Any] | None = None
    orig: Annotated[
        str | None,
        ClcNote('The raw file contents, before front matter parsing.')
        ] = None
    value: object = None

    @property
    def basename(self) -> str:
        return posixpath.basename(self.path.replace(os.sep, '/'))

    @property
    def stem(self) -> str:
        return posixpath.splitext(self.basename)[0]

    def to_dict(self) -> dict[str, Any]:
        """Converts the template into its canonical mapping form. Absent
        optional fields are omitted entirely, but ``content`` is always
        included, even when it's ``None``.
        """
        result: dict[str, Any] = {'path': self.path, 'content': self.content}
        for template_field in fields(self):
            if template_field.name in result:
                continue

            field_value = getattr(self, template_field.name)
            if field_value is not None:
                result[template_field.name] = field_value

        return result


@dataclass(slots=True)
class VinylTemplate(NormalizedTemplate):
    """Used when loading in vinyl mode. In addition to the usual fields,
    vinyl templates carry the encoded ``contents`` and, for templates
    backed by a real file, the ``stat`` of that file.
    """
    contents: bytes = b''
    stat: os.stat_result | None = field(default=None, compare=False)

    @classmethod
    def from_template(
            cls,
            template: NormalizedTemplate,
            stat: os.stat_result | None = None
            ) -> VinylTemplate:
        if template.content is None:
            contents = b''
        else:
            contents = template.content.encode('utf-8')

        return cls(
            path=template.path,
            content=template.content,
            ext=template.ext,
            data=template.data,
            locals=template.locals,
            options=template.options,
            orig=template.orig,
            value=template.value,
            contents=contents,
            stat=stat)
