""" Yaml loading helpers. """
import logging
import os

from typing import Any, Optional

import yaml

from .files import FileNotFound, resolve_file


class InvalidConfiguration(Exception):
    """ Raised if a configuration issue is found. """


class Config:
    """ Kernel rebuild config parameters. """

    # Config keywords
    keywords = [
        'base', 'patches', 'kernel_image', 'device_trees', 'base_image', 'build_packages',
        'build_user', 'source_dir', 'container_engine', 'container_tag', 'result_mount',
        'helper_package', 'helper_goos', 'search_subpath', 'temp_root', 'toolchain_root',
        'template'
    ]

    def __init__(self, config_file: Optional[str] = None) -> None:
        # Patches applied to the kernel sources, in order.
        self.patches: list[str] = [
            '0001-Revert-add-index-to-the-ethernet-alias.patch',
            # serial
            '0101-expose-UART0-ttyAMA0-on-GPIO-14-15-disable-UART1-tty.patch',
            '0102-expose-UART0-ttyAMA0-on-GPIO-14-15-disable-UART1-tty.patch',
        ]
        # Kernel image, input and build result.
        self.kernel_image: str = 'vmlinuz'
        # Device trees, inputs and build results.
        self.device_trees: list[str] = [
            'bcm2710-rpi-3-b.dtb',
            'bcm2710-rpi-3-b-plus.dtb',
        ]
        # Base image of the build container.
        self.base_image: str = 'debian:stretch'
        # Packages installed in the build container.
        self.build_packages: list[str] = [
            'crossbuild-essential-arm64', 'bc', 'libssl-dev', 'bison', 'flex'
        ]
        # Name of the unprivileged build user.
        self.build_user: str = 'builduser'
        # Kernel source folder in the build container.
        self.source_dir: str = '/usr/src'
        # Container engine binary.
        self.container_engine: str = 'docker'
        # Tag of the build container image.
        self.container_tag: str = 'gokr-rebuild-kernel'
        # Mount point of the staging dir in the build container.
        self.result_mount: str = '/tmp/buildresult'
        # Go package of the in-container kernel build helper.
        self.helper_package: str = 'github.com/gokrazy/kernel/cmd/gokr-build-kernel'
        # Target OS of the helper binary.
        self.helper_goos: str = 'linux'
        # Secondary search folder, relative to the toolchain root.
        self.search_subpath: str = 'src/github.com/gokrazy/kernel'
        # Parent of the staging dir. Docker only allows volume mounts
        # below certain paths on some platforms.
        self.temp_root: str = '/tmp'
        # Toolchain root, skips the `go env GOPATH` lookup if set.
        self.toolchain_root: Optional[str] = None
        # Container build definition template file.
        self.template: Optional[str] = None

        if config_file:
            self._parse_yaml(config_file)

    @property
    def helper_name(self) -> str:
        """ File name of the helper binary. """
        return self.helper_package.rstrip('/').split('/')[-1]

    @property
    def outputs(self) -> list[str]:
        """ Names of the build results. """
        return [self.kernel_image] + self.device_trees

    def _load_yaml(self, file: str) -> dict[str, Any]:
        with open(file, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)

        if data is None:
            return {}

        if not isinstance(data, dict):
            raise InvalidConfiguration(f'Config file {file} is not a mapping!')

        return data

    def _parse_yaml(self, file: str) -> None:
        """ Load yaml configuration. """
        config_file = os.path.abspath(file)
        config_dir = os.path.dirname(config_file)

        if not os.path.isfile(config_file):
            raise FileNotFound(f'Config file {config_file} not found!')

        logging.info('Loading config file %s...', config_file)
        config = self._load_yaml(config_file)

        base = config.get('base', None)
        if base:
            # Handle parent config files
            if isinstance(base, str):
                bases = [base]
            else:
                bases = base

            if not isinstance(bases, list):
                raise InvalidConfiguration(
                    f'Unknown base value {base} ({type(base)})!')

            for b in bases:
                b = resolve_file(
                    file=b,
                    relative_base_dir=config_dir
                )
                self._parse_yaml(b)

        if 'patches' in config:
            self.patches = self._str_list(config, 'patches', config_file)

        if 'kernel_image' in config:
            self.kernel_image = str(config.get('kernel_image'))

        if 'device_trees' in config:
            self.device_trees = self._str_list(config, 'device_trees', config_file)

        if 'base_image' in config:
            self.base_image = str(config.get('base_image'))

        if 'build_packages' in config:
            self.build_packages = self._str_list(config, 'build_packages', config_file)

        if 'build_user' in config:
            self.build_user = str(config.get('build_user'))

        if 'source_dir' in config:
            self.source_dir = str(config.get('source_dir'))

        if 'container_engine' in config:
            self.container_engine = str(config.get('container_engine'))

        if 'container_tag' in config:
            self.container_tag = str(config.get('container_tag'))

        if 'result_mount' in config:
            self.result_mount = str(config.get('result_mount'))

        if 'helper_package' in config:
            self.helper_package = str(config.get('helper_package'))

        if 'helper_goos' in config:
            self.helper_goos = str(config.get('helper_goos'))

        if 'search_subpath' in config:
            self.search_subpath = str(config.get('search_subpath'))

        if 'temp_root' in config:
            self.temp_root = resolve_file(
                file=str(config.get('temp_root')),
                relative_base_dir=config_dir
            )

        if 'toolchain_root' in config:
            self.toolchain_root = resolve_file(
                file=str(config.get('toolchain_root')),
                relative_base_dir=config_dir
            )

        if 'template' in config:
            self.template = resolve_file(
                file=str(config.get('template')),
                relative_base_dir=config_dir
            )
            if not os.path.isfile(self.template):
                raise FileNotFound(f'The template {self.template} referenced form config file '
                                   f'{config_file} was not found!')

        for key in config.keys():
            if key not in self.keywords:
                logging.warning(
                    'Config file %s is using unknown keyword %s!',
                    config_file, key)

    def _str_list(self, config: dict[str, Any], key: str, config_file: str) -> list[str]:
        """ Get a list of strings from the config. """
        value = config.get(key, None)
        if not isinstance(value, list):
            raise InvalidConfiguration(
                f'Value of {key} in config file {config_file} is no list!')
        return [str(v) for v in value]
