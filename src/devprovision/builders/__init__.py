# Copyright (C) 2024 Antonio Paolillo. All rights reserved.
# SPDX-License-Identifier: MIT

"""
This module provides the builder of the development container image: it records Dockerfile
instructions, stages the files they copy into a build context, and drives `docker build` with
the build arguments consumed by the setup command.
"""
import tempfile
from pathlib import Path
from typing import Dict, List

from devprovision.builders.contexts import BuildContext
from devprovision.config import BUILD_ARGUMENT_NAMES, BuildArguments
from devprovision.reporting import Verbosity
from devprovision.sysutils import PathType, mkdir, mkdir_for_path, shell_out

DEFAULT_BASE_IMAGE = "python:3.11-slim-bookworm"
SETUP_STAGING_DIR = "/tmp/devprovision"
PACKAGE_DIR = Path(__file__).resolve().parents[1]
DOCKER_WORK_DIR = Path("/tmp/devprovision/docker/")
LATEST_DOCKERFILE_PATH = DOCKER_WORK_DIR / "latest" / "Dockerfile"


def render_dockerfile_content(instructions: List[str]) -> str:
    """
    Generates the content of a Dockerfile from a list of instructions.

    Parameters:
        instructions (List[str]): Dockerfile lines (instructions, comments or blank lines).

    Returns:
        str: The Dockerfile content, ending with exactly one newline.
    """
    joined_lines = "\n".join(instructions)
    return joined_lines.strip() + "\n"


class DockerBuilder:
    """
    Records the instructions of a Dockerfile and builds the corresponding image.
    """

    def __init__(self, tag: str, use_buildkit: bool = True) -> None:
        """
        Parameters:
            tag (str): The tag of the built image.
            use_buildkit (bool): Whether to use BuildKit for the image build.
        """
        self._tag = tag
        self._use_buildkit = use_buildkit
        self._instructions: List[str] = []
        self._context = BuildContext()

    def space(self) -> None:
        """Adds a blank line."""
        self._instructions.append("")

    def desc(self, text: str) -> None:
        """
        Adds a comment line.

        Parameters:
            text (str): The comment text.
        """
        self._instructions.append(f"# {text}")

    def from_image(self, tag: str) -> None:
        """
        Sets the base image.

        Parameters:
            tag (str): The base image tag.
        """
        self._instructions.append(f"FROM {tag}")

    def arg(self, name: str, value: str | None = None) -> None:
        """
        Declares a build argument, optionally with a default value.

        Parameters:
            name (str): The name of the argument.
            value (str | None): The default value, if any.
        """
        self._instructions.append(f"ARG {name}" if value is None else f"ARG {name}={value}")

    def copy(self, source: PathType, destination: PathType) -> None:
        """
        Stages a host file or directory in the build context and copies it into the image.

        Parameters:
            source (PathType): The host path.
            destination (PathType): The path inside the image.
        """
        ctx_path = self._context.add_context_entry(host_path=source)
        self._instructions.append(f"COPY {ctx_path} {destination}")

    def run(self, command: str) -> None:
        """
        Adds a RUN instruction.

        Parameters:
            command (str): The shell command to run.
        """
        self._instructions.append(f"RUN {command}")

    def run_multiple(self, commands: List[str]) -> None:
        """
        Adds several commands chained with `&&` in a single RUN instruction.

        Parameters:
            commands (List[str]): The commands to run.
        """
        self.run(command=" && \\\n    ".join(commands))

    def entrypoint(self, list_command: List[str]) -> None:
        """
        Sets the entrypoint of the container (exec form).

        Parameters:
            list_command (List[str]): The entrypoint command and its arguments.
        """
        body = ", ".join(f'"{c}"' for c in list_command)
        self._instructions.append(f"ENTRYPOINT [{body}]")

    def render(self) -> str:
        """Returns the Dockerfile content."""
        return render_dockerfile_content(instructions=self._instructions)

    def generate_dockerfile(self, dockerfile_paths: List[PathType]) -> None:
        """
        Writes the Dockerfile to the given paths and to a well-known location under /tmp.

        Parameters:
            dockerfile_paths (List[PathType]): Paths where the Dockerfile should be saved.
        """
        dockerfile_content = self.render()
        for dockerfile_path in list(dockerfile_paths) + [LATEST_DOCKERFILE_PATH]:
            mkdir_for_path(path=dockerfile_path)
            with open(dockerfile_path, "w") as dockerfile:
                dockerfile.write(dockerfile_content)

    def get_build_environment(self) -> Dict[str, str]:
        """
        Returns the environment variables of the `docker build` process itself.
        """
        return {"BUILDKIT_PROGRESS": "plain"} if self._use_buildkit else {"DOCKER_BUILDKIT": "0"}

    def get_build_commands(
        self,
        dockerfile_path: PathType,
        docker_build_dir: PathType,
        build_args: Dict[str, str] | None = None,
        docker_path: str = "docker",
    ) -> List[str]:
        """
        Constructs the `docker build` command.

        Parameters:
            dockerfile_path (PathType): The path to the Dockerfile.
            docker_build_dir (PathType): The directory of the build context.
            build_args (Dict[str, str] | None): Values of the Dockerfile build arguments.
            docker_path (str): The docker executable.

        Returns:
            List[str]: The command as a list of strings.
        """
        build_args = build_args if build_args else {}
        build_arg_flags = [f"--build-arg={k}={v}" for k, v in build_args.items()]
        return (
            [docker_path, "build", "--file", f"{dockerfile_path}"]
            + build_arg_flags
            + [f"--tag={self._tag}", f"{docker_build_dir}"]
        )

    def build(self, build_arguments: BuildArguments, dockerfile_savepath: PathType = "") -> None:
        """
        Builds the image from a temporary directory holding the Dockerfile and the staged context.

        Parameters:
            build_arguments (BuildArguments): Values of the Dockerfile build arguments.
            dockerfile_savepath (PathType): Optional path to also save the Dockerfile to.
        """
        mkdir(DOCKER_WORK_DIR)
        with tempfile.TemporaryDirectory(prefix="docker-build-", dir=DOCKER_WORK_DIR) as temp_dir:
            temp_path = Path(temp_dir)
            dockerfile_path = (temp_path / "Dockerfile").resolve()
            dockerfile_paths = [dockerfile_path] + (
                [dockerfile_savepath] if dockerfile_savepath else []
            )
            self.generate_dockerfile(dockerfile_paths=dockerfile_paths)

            context_path = temp_path / "context"
            self._context.build(context_path=context_path)

            docker_path = shell_out(command=["which", "docker"], output_is_log=False)
            command = self.get_build_commands(
                dockerfile_path=dockerfile_path,
                docker_build_dir=context_path,
                build_args=build_arguments.as_build_args(),
                docker_path=docker_path,
            )

            shell_out(
                command=command,
                current_dir=context_path,
                environment=self.get_build_environment(),
                output_is_log=True,
            )


def get_devcontainer_builder(
    tag: str,
    base_image: str = DEFAULT_BASE_IMAGE,
    verbosity: Verbosity = Verbosity.QUIET,
) -> DockerBuilder:
    """
    Creates the builder of the development container: the build arguments, the staged setup
    package, the setup run, and an entrypoint that keeps the container alive for the editor.

    Parameters:
        tag (str): Tag to assign to the image.
        base_image (str): Debian-based image providing a Python interpreter.
        verbosity (Verbosity): Output mode of the setup run during the image build.

    Returns:
        DockerBuilder: The configured builder.
    """
    builder = DockerBuilder(tag=tag)

    builder.desc("Debian Bookworm (slim) with the Python interpreter running the setup.")
    builder.from_image(tag=base_image)
    builder.space()

    builder.arg(name=BUILD_ARGUMENT_NAMES[0])
    builder.arg(name=BUILD_ARGUMENT_NAMES[1])
    builder.space()

    for name in BUILD_ARGUMENT_NAMES[2:]:
        builder.arg(name=name)
    builder.space()

    builder.copy(source=PACKAGE_DIR, destination=f"{SETUP_STAGING_DIR}/{PACKAGE_DIR.name}")
    builder.space()

    builder.run_multiple(
        commands=[
            "pip install --no-cache-dir click",
            f"PYTHONPATH={SETUP_STAGING_DIR} python3 -m devprovision.cli setup {verbosity.value} "
            f"--script {SETUP_STAGING_DIR}",
        ]
    )
    builder.space()

    builder.desc("Necessary for DevContainer configuration.")
    builder.entrypoint(list_command=["bash", "-c", "sleep infinity"])

    return builder
