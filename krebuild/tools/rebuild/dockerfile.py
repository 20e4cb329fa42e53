""" Container build definition rendering. """
import importlib.resources
import logging
import os

from dataclasses import dataclass, field
from typing import Optional

import jinja2

from krebuild.common.config import Config

from . import data


@dataclass
class RenderContext:
    """ Values of the container build definition template. """
    uid: int
    gid: int
    patches: list[str]
    base_image: str = 'debian:stretch'
    packages: list[str] = field(default_factory=list)
    helper: str = 'gokr-build-kernel'
    user: str = 'builduser'
    source_dir: str = '/usr/src'

    @classmethod
    def from_config(cls, config: Config, uid: Optional[int] = None, gid: Optional[int] = None):
        """ Build the context for the invoking user. """
        return cls(
            uid=os.getuid() if uid is None else uid,
            gid=os.getgid() if gid is None else gid,
            patches=[os.path.basename(p) for p in config.patches],
            base_image=config.base_image,
            packages=list(config.build_packages),
            helper=config.helper_name,
            user=config.build_user,
            source_dir=config.source_dir,
        )


def load_template(path: Optional[str] = None) -> str:
    """ Get the template text, the packaged Dockerfile template if no path is given. """
    if path:
        logging.debug('Using template %s.', path)
        with open(path, 'r', encoding='utf-8') as f:
            return f.read()

    template = importlib.resources.files(data) / 'Dockerfile.j2'
    return template.read_text('utf-8')


def render_dockerfile(template: str, context: RenderContext) -> str:
    """ Render the container build definition.

    Args:
        template: Jinja2 template text.
        context: Template values.

    Returns:
        The rendered text.
    """
    template_obj = jinja2.Template(
        template,
        trim_blocks=True,
        keep_trailing_newline=True,
        undefined=jinja2.StrictUndefined
    )

    return template_obj.render(
        uid=context.uid,
        gid=context.gid,
        patches=context.patches,
        base_image=context.base_image,
        packages=context.packages,
        helper=context.helper,
        user=context.user,
        source_dir=context.source_dir,
    )
