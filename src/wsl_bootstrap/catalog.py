"""The ordered plan of phases and steps that provisions a WSL workstation.

Each phase builder returns a ``Phase``; ``build_plan`` assembles them in
run order. Paths use ``~`` and are expanded against the runtime
environment's home directory.
"""

from __future__ import annotations

import getpass
import logging

from wsl_bootstrap import templates
from wsl_bootstrap.config import PHASES, BootstrapConfig
from wsl_bootstrap.environment import EnvContribution
from wsl_bootstrap.fragments import ConfigFileFragment
from wsl_bootstrap.probe import (
    ToolSpec,
    any_of,
    command_succeeds,
    negate,
    output_contains,
    path_exists,
    recently_modified,
    tool_present,
)
from wsl_bootstrap.steps import (
    APT_NONINTERACTIVE,
    CommandInstall,
    DirectDownloadInstall,
    EnsureDirectoryStep,
    EnsureFragmentStep,
    NoOp,
    PackageManagerInstall,
    Phase,
    ScriptPipeInstall,
    WaitForReady,
    WriteFileStep,
)
from wsl_bootstrap.types import Criticality

logger = logging.getLogger(__name__)

REQUIRED = Criticality.REQUIRED
OPTIONAL = Criticality.OPTIONAL

APT_INDEX_MAX_AGE = 24 * 3600

CORE_PACKAGES = (
    "build-essential",
    "git",
    "curl",
    "wget",
    "gnupg",
    "ca-certificates",
    "jq",
    "unzip",
    "zip",
    "make",
    "pkg-config",
    "libssl-dev",
    "libffi-dev",
    "zlib1g-dev",
    "libbz2-dev",
    "libreadline-dev",
    "libsqlite3-dev",
    "liblzma-dev",
    "xz-utils",
    "python3-pip",
    "pipx",
)

GH_KEYRING = "/usr/share/keyrings/githubcli-archive-keyring.gpg"
GH_SOURCES = "/etc/apt/sources.list.d/github-cli.list"
DOCKER_KEYRING = "/etc/apt/keyrings/docker.asc"
DOCKER_SOURCES = "/etc/apt/sources.list.d/docker.list"

SSH_KEY = "~/.ssh/id_ed25519"
GIT_IDENTITY_HINT = (
    "git config --global user.email \"you@example.com\" "
    "&& git config --global user.name \"Your Name\""
)

# Tools known to ``wsl-bootstrap probe`` and the verify phase.
TOOLS: dict[str, ToolSpec] = {
    spec.name: spec
    for spec in (
        ToolSpec("git", ("git", "--version")),
        ToolSpec("curl", ("curl", "--version")),
        ToolSpec("jq", ("jq", "--version")),
        ToolSpec("rg", ("rg", "--version")),
        ToolSpec("fd", ("fd", "--version"), aliases=("fdfind",)),
        ToolSpec("fzf", ("fzf", "--version"), locations=("~/.fzf/bin/fzf",)),
        ToolSpec("bat", ("bat", "--version"), aliases=("batcat",)),
        ToolSpec("eza", ("eza", "--version")),
        ToolSpec("node", ("node", "--version")),
        ToolSpec("npm", ("npm", "--version")),
        ToolSpec("python", ("python3", "--version"), aliases=("python3",)),
        ToolSpec("pyenv", ("pyenv", "--version"), locations=("~/.pyenv/bin/pyenv",)),
        ToolSpec("rustc", ("rustc", "--version"), locations=("~/.cargo/bin/rustc",)),
        ToolSpec("go", ("go", "version"), r"go(\d+\.\d+(?:\.\d+)?)", locations=("/usr/local/go/bin/go",)),
        ToolSpec("docker", ("docker", "--version")),
        ToolSpec("docker-compose", ("docker-compose", "--version")),
        ToolSpec("gh", ("gh", "--version")),
        ToolSpec("claude", ("claude", "--version")),
        ToolSpec("aider", ("aider", "--version"), locations=("~/.local/bin/aider",)),
        ToolSpec("ollama", ("ollama", "--version")),
    )
}


def _user() -> str:
    try:
        return getpass.getuser()
    except (OSError, KeyError):
        return "dev"


def compose_project_name() -> str:
    """Docker Compose project name isolating this user's containers."""
    return f"{_user()}-ai-dev"


def build_plan(config: BootstrapConfig) -> list[Phase]:
    """Build every phase in run order.

    Skipping is applied by the runner so that skipped phases are reported.

    Args:
        config: Effective configuration.

    Returns:
        Phases in the order of ``PHASES``.
    """
    builders = {
        "infrastructure": infrastructure_phase,
        "user-env": user_env_phase,
        "github": github_phase,
        "container-engine": container_engine_phase,
        "dev-tools": dev_tools_phase,
        "ai-agents": ai_agents_phase,
        "verify": verify_phase,
    }
    return [builders[name](config) for name in PHASES]


# ============================================================================
# Phase builders
# ============================================================================


def infrastructure_phase(config: BootstrapConfig) -> Phase:
    return Phase(
        name="infrastructure",
        title="System packages",
        steps=[
            CommandInstall(
                name="apt-index",
                commands=(("apt-get", "update", "-qq"),),
                sudo=True,
                detector=recently_modified("/var/cache/apt/pkgcache.bin", APT_INDEX_MAX_AGE),
                hint="sudo apt-get update",
            ),
            CommandInstall(
                name="apt-upgrade",
                commands=((*APT_NONINTERACTIVE, "apt-get", "upgrade", "-y", "-qq"),),
                sudo=True,
                detector=negate(output_contains(["apt-get", "--simulate", "upgrade"], "Inst ")),
                hint="sudo apt-get upgrade -y",
            ),
            PackageManagerInstall(
                name="core-packages",
                packages=CORE_PACKAGES,
                criticality=REQUIRED,
                verifier=tool_present("git"),
            ),
            CommandInstall(
                name="apt-cleanup",
                commands=(
                    (*APT_NONINTERACTIVE, "apt-get", "autoremove", "-y", "-qq"),
                    ("apt-get", "clean", "-qq"),
                ),
                sudo=True,
                detector=negate(output_contains(["apt-get", "--simulate", "autoremove"], "Remv ")),
                hint="sudo apt-get autoremove -y && sudo apt-get clean",
            ),
        ],
    )


def user_env_phase(config: BootstrapConfig) -> Phase:
    project = compose_project_name()
    return Phase(
        name="user-env",
        title="User environment",
        steps=[
            EnsureDirectoryStep(
                name="directories",
                paths=(config.projects_dir, "~/tools", "~/.local/bin", "~/.bashrc.d"),
                criticality=REQUIRED,
                env=EnvContribution(path_prepend=("~/.local/bin",)),
            ),
            EnsureDirectoryStep(
                name="private-directories",
                paths=("~/.ssh", "~/.ssh/sockets", "~/.config/ai-agents"),
                mode=0o700,
                criticality=REQUIRED,
            ),
            EnsureDirectoryStep(
                name="compose-project-directory",
                paths=(f"~/docker-projects/{project}",),
            ),
            WriteFileStep(
                name="path-module",
                path="~/.bashrc.d/00-path.sh",
                content=templates.PATH_MODULE,
            ),
            WriteFileStep(
                name="aliases-module",
                path="~/.bashrc.d/10-aliases.sh",
                content=templates.ALIASES_MODULE,
            ),
            EnsureFragmentStep(
                name="bashrc-d-loader",
                path=config.rc_file,
                fragment=ConfigFileFragment(
                    name="bashrc.d loader",
                    marker="bashrc.d",
                    text=(
                        "# Source modular bashrc configurations\n"
                        "if [[ -d ~/.bashrc.d ]]; then\n"
                        "    for file in ~/.bashrc.d/*.sh; do\n"
                        '        [[ -r "$file" ]] && source "$file"\n'
                        "    done\n"
                        "fi\n"
                    ),
                ),
                criticality=REQUIRED,
            ),
            EnsureFragmentStep(
                name="shell-environment",
                path=config.rc_file,
                fragment=ConfigFileFragment(
                    name="shell environment",
                    marker="COMPOSE_PROJECT_NAME",
                    text=(
                        "# Docker Compose project isolation\n"
                        f'export COMPOSE_PROJECT_NAME="{project}"\n'
                        'export PATH="$HOME/.local/bin:$PATH"\n'
                        "export EDITOR=vim\n"
                        "export VISUAL=vim\n"
                    ),
                ),
                env=EnvContribution(variables={"COMPOSE_PROJECT_NAME": project}),
            ),
            WriteFileStep(
                name="api-key-placeholder",
                path=config.credentials_file,
                content=templates.CREDENTIALS_PLACEHOLDER,
                mode=0o600,
            ),
            EnsureFragmentStep(
                name="api-key-loader",
                path=config.rc_file,
                fragment=ConfigFileFragment(
                    name="API key loader",
                    marker=config.credentials_file.removeprefix("~/"),
                    text=(
                        "# Source AI agent API keys\n"
                        f"if [[ -f {config.credentials_file} ]]; then\n"
                        f"    source {config.credentials_file}\n"
                        "fi\n"
                    ),
                ),
            ),
            EnsureFragmentStep(
                name="login-profile",
                path=config.profile_file,
                fragment=ConfigFileFragment(
                    name="login profile",
                    marker="bashrc",
                    text=(
                        "# Source .bashrc for login shells\n"
                        f"if [[ -f {config.rc_file} ]]; then\n"
                        f"    source {config.rc_file}\n"
                        "fi\n"
                    ),
                ),
            ),
        ],
    )


def github_phase(config: BootstrapConfig) -> Phase:
    gh_present = tool_present("gh")
    return Phase(
        name="github",
        title="GitHub",
        steps=[
            DirectDownloadInstall(
                name="gh-keyring",
                url="https://cli.github.com/packages/githubcli-archive-keyring.gpg",
                kind="file",
                destination=GH_KEYRING,
                sudo=True,
                detector=any_of(gh_present, path_exists(GH_KEYRING)),
            ),
            CommandInstall(
                name="gh-apt-source",
                commands=(
                    (
                        "sh",
                        "-c",
                        "echo \"deb [arch=$(dpkg --print-architecture) "
                        f"signed-by={GH_KEYRING}] https://cli.github.com/packages stable main\" "
                        f"> {GH_SOURCES}",
                    ),
                    ("apt-get", "update", "-qq"),
                ),
                sudo=True,
                detector=any_of(gh_present, path_exists(GH_SOURCES)),
            ),
            PackageManagerInstall(
                name="gh",
                packages=("gh",),
                binary="gh",
                criticality=REQUIRED,
                hint="See https://github.com/cli/cli/blob/trunk/docs/install_linux.md",
            ),
            CommandInstall(
                name="ssh-key",
                commands=(
                    ("ssh-keygen", "-t", "ed25519", "-C", f"{_user()}@wsl",
                     "-f", SSH_KEY, "-N", ""),
                ),
                creates=SSH_KEY,
            ),
            EnsureFragmentStep(
                name="ssh-github-host",
                path="~/.ssh/config",
                fragment=ConfigFileFragment(
                    name="GitHub SSH host",
                    marker="Host github.com",
                    text=(
                        "Host github.com\n"
                        "    HostName github.com\n"
                        "    User git\n"
                        f"    IdentityFile {SSH_KEY}\n"
                        "    IdentitiesOnly yes\n"
                        "    AddKeysToAgent yes\n"
                    ),
                ),
                create_mode=0o600,
            ),
            EnsureFragmentStep(
                name="ssh-agent",
                path=config.rc_file,
                fragment=ConfigFileFragment(
                    name="ssh-agent",
                    marker="ssh-agent",
                    text=(
                        "# Start ssh-agent and load the default key\n"
                        'if [ -z "$SSH_AUTH_SOCK" ]; then\n'
                        '    eval "$(ssh-agent -s)" > /dev/null 2>&1\n'
                        f"    ssh-add {SSH_KEY} 2>/dev/null\n"
                        "fi\n"
                    ),
                ),
            ),
            CommandInstall(
                name="git-defaults",
                commands=(
                    ("git", "config", "--global", "init.defaultBranch", "main"),
                    ("git", "config", "--global", "pull.rebase", "false"),
                ),
                detector=output_contains(["git", "config", "--global", "init.defaultBranch"], "main"),
            ),
            NoOp(
                name="gh-auth",
                detector=command_succeeds(["gh", "auth", "status"]),
                missing="GitHub CLI is not authenticated",
                hint="gh auth login --web --git-protocol https && gh auth setup-git",
            ),
            CommandInstall(
                name="git-identity",
                commands=(
                    (
                        "sh",
                        "-c",
                        "email=\"$(gh api user/emails --jq '[.[] | select(.primary)][0].email // empty')\" "
                        "&& [ -n \"$email\" ] && git config --global user.email \"$email\"",
                    ),
                    (
                        "sh",
                        "-c",
                        "name=\"$(gh api user --jq '.name // .login')\" "
                        "&& [ -n \"$name\" ] && git config --global user.name \"$name\"",
                    ),
                ),
                detector=command_succeeds(["git", "config", "--global", "user.email"]),
                hint=GIT_IDENTITY_HINT,
            ),
        ],
    )


def container_engine_phase(config: BootstrapConfig) -> Phase:
    docker_present = tool_present("docker")
    compose_present = any_of(
        command_succeeds(["docker", "compose", "version"]), tool_present("docker-compose")
    )
    desktop_hint = (
        "Enable Docker Desktop WSL integration (Settings > Resources > WSL Integration), "
        "or: sudo apt-get install docker-ce-cli docker-compose-plugin"
    )
    return Phase(
        name="container-engine",
        title="Container engine",
        steps=[
            DirectDownloadInstall(
                name="docker-keyring",
                url="https://download.docker.com/linux/ubuntu/gpg",
                kind="file",
                destination=DOCKER_KEYRING,
                sudo=True,
                detector=any_of(docker_present, path_exists(DOCKER_KEYRING)),
            ),
            CommandInstall(
                name="docker-apt-source",
                commands=(
                    (
                        "sh",
                        "-c",
                        "echo \"deb [arch=$(dpkg --print-architecture) "
                        f"signed-by={DOCKER_KEYRING}] https://download.docker.com/linux/ubuntu "
                        f"$(. /etc/os-release && echo $VERSION_CODENAME) stable\" > {DOCKER_SOURCES}",
                    ),
                    ("apt-get", "update", "-qq"),
                ),
                sudo=True,
                detector=any_of(docker_present, path_exists(DOCKER_SOURCES)),
            ),
            PackageManagerInstall(
                name="docker-cli",
                packages=("docker-ce-cli", "docker-compose-plugin", "docker-buildx-plugin"),
                binary="docker",
                criticality=REQUIRED,
                hint=desktop_hint,
            ),
            DirectDownloadInstall(
                name="docker-compose",
                url="https://github.com/docker/compose/releases/download/{tag}/docker-compose-linux-x86_64",
                release=("docker", "compose"),
                destination="/usr/local/bin/docker-compose",
                sudo=True,
                detector=compose_present,
            ),
            EnsureFragmentStep(
                name="docker-host",
                path=config.rc_file,
                fragment=ConfigFileFragment(
                    name="Docker host",
                    marker="DOCKER_HOST",
                    text=(
                        "# Docker Desktop exposes its daemon through WSL integration.\n"
                        "# Uncomment to use a daemon listening on TCP instead.\n"
                        '# export DOCKER_HOST="tcp://localhost:2375"\n'
                    ),
                ),
            ),
            WaitForReady(
                name="docker-daemon",
                ready=command_succeeds(["docker", "ps"]),
                timeout=config.docker_wait_timeout,
                interval=config.docker_wait_interval,
                hint="Start Docker Desktop on Windows and enable integration for this distribution, then run: docker ps",
            ),
        ],
    )


def dev_tools_phase(config: BootstrapConfig) -> Phase:
    nvm_sh = '. "$NVM_DIR/nvm.sh"'
    return Phase(
        name="dev-tools",
        title="Developer tools",
        steps=[
            PackageManagerInstall(
                name="ripgrep",
                packages=("ripgrep",),
                binary="rg",
                fallback=DirectDownloadInstall(
                    name="ripgrep-release",
                    url="https://github.com/BurntSushi/ripgrep/releases/download/{tag}/ripgrep_{version}-1_amd64.deb",
                    release=("BurntSushi", "ripgrep"),
                    kind="deb",
                ),
            ),
            PackageManagerInstall(
                name="fd",
                packages=("fd-find",),
                binary="fd",
                aliases=("fdfind",),
                fallback=DirectDownloadInstall(
                    name="fd-release",
                    url="https://github.com/sharkdp/fd/releases/download/{tag}/fd_{version}_amd64.deb",
                    release=("sharkdp", "fd"),
                    kind="deb",
                ),
            ),
            CommandInstall(
                name="fd-link",
                commands=(("ln", "-sf", "/usr/bin/fdfind", "~/.local/bin/fd"),),
                detector=any_of(tool_present("fd"), negate(tool_present("fdfind"))),
            ),
            PackageManagerInstall(
                name="bat",
                packages=("bat",),
                binary="bat",
                aliases=("batcat",),
            ),
            CommandInstall(
                name="bat-link",
                commands=(("ln", "-sf", "/usr/bin/batcat", "~/.local/bin/bat"),),
                detector=any_of(tool_present("bat"), negate(tool_present("batcat"))),
            ),
            CommandInstall(
                name="fzf-source",
                commands=(
                    ("git", "clone", "--depth", "1", "https://github.com/junegunn/fzf.git", "~/.fzf"),
                ),
                detector=any_of(tool_present("fzf"), path_exists("~/.fzf")),
                creates="~/.fzf",
            ),
            CommandInstall(
                name="fzf",
                commands=(
                    ("~/.fzf/install", "--key-bindings", "--completion", "--no-update-rc"),
                ),
                detector=tool_present("fzf", locations=("~/.fzf/bin/fzf",)),
                creates="~/.fzf/bin/fzf",
                env=EnvContribution(path_append=("~/.fzf/bin",)),
            ),
            PackageManagerInstall(
                name="eza",
                packages=("eza",),
                binary="eza",
            ),
            ScriptPipeInstall(
                name="nvm",
                url=f"https://raw.githubusercontent.com/nvm-sh/nvm/{config.nvm_version}/install.sh",
                marker_path="~/.nvm/nvm.sh",
                env=EnvContribution(variables={"NVM_DIR": "~/.nvm"}),
            ),
            CommandInstall(
                name="node",
                commands=(
                    ("bash", "-c", f'{nvm_sh} && nvm install --lts && nvm alias default "lts/*"'),
                ),
                detector=tool_present("node", locations=("~/.nvm/versions/node/*/bin/node",)),
                env=EnvContribution(path_prepend=("~/.nvm/versions/node/*/bin",)),
                verifier=tool_present("npm"),
                hint="nvm install --lts",
            ),
            ScriptPipeInstall(
                name="pyenv",
                url="https://pyenv.run",
                marker_path="~/.pyenv/bin/pyenv",
                env=EnvContribution(
                    path_prepend=("~/.pyenv/bin", "~/.pyenv/shims"),
                    variables={"PYENV_ROOT": "~/.pyenv"},
                ),
            ),
            CommandInstall(
                name="python",
                commands=(
                    ("pyenv", "install", "-s", config.python_version),
                    ("pyenv", "global", config.python_version),
                ),
                detector=output_contains(["pyenv", "version-name"], config.python_version),
            ),
            ScriptPipeInstall(
                name="rust",
                url="https://sh.rustup.rs",
                interpreter=("sh",),
                args=("-y", "--no-modify-path"),
                detector=tool_present("rustc", locations=("~/.cargo/bin/rustc",)),
                env=EnvContribution(path_prepend=("~/.cargo/bin",)),
            ),
            DirectDownloadInstall(
                name="go",
                url=f"https://go.dev/dl/go{config.go_version}.linux-amd64.tar.gz",
                kind="tarball",
                destination="/usr/local",
                replace="/usr/local/go",
                sudo=True,
                detector=tool_present("go", locations=("/usr/local/go/bin/go",)),
                env=EnvContribution(path_append=("/usr/local/go/bin", "~/go/bin")),
            ),
        ],
    )


def ai_agents_phase(config: BootstrapConfig) -> Phase:
    return Phase(
        name="ai-agents",
        title="AI coding agents",
        steps=[
            PackageManagerInstall(
                name="claude-code",
                packages=("@anthropic-ai/claude-code",),
                manager="npm",
                binary="claude",
            ),
            EnsureDirectoryStep(
                name="claude-config-directory",
                paths=("~/.config/claude",),
                mode=0o700,
            ),
            WriteFileStep(
                name="claude-config",
                path="~/.config/claude/config.json",
                content=templates.CLAUDE_CONFIG,
            ),
            PackageManagerInstall(
                name="copilot",
                packages=("github/gh-copilot",),
                manager="gh-extension",
                hint="gh auth login, then: gh extension install github/gh-copilot",
            ),
            PackageManagerInstall(
                name="aider",
                packages=("aider-chat",),
                manager="pip",
                detector=tool_present("aider", locations=("~/.local/bin/aider",)),
                fallback=PackageManagerInstall(
                    name="aider-pipx",
                    packages=("aider-chat",),
                    manager="pipx",
                ),
            ),
            WriteFileStep(
                name="aider-config",
                path="~/.aider.conf.yml",
                content=templates.AIDER_CONFIG,
            ),
            WriteFileStep(
                name="continue-config",
                path="~/.continue/config.json",
                content=templates.CONTINUE_CONFIG,
            ),
            PackageManagerInstall(
                name="openai-sdk",
                packages=("openai",),
                manager="pip",
            ),
            ScriptPipeInstall(
                name="ollama",
                url="https://ollama.com/install.sh",
                interpreter=("sh",),
                binary="ollama",
                hint="Install Ollama on Windows and reach it from WSL at http://localhost:11434",
            ),
            WriteFileStep(
                name="ai-agents-module",
                path="~/.bashrc.d/20-ai-agents.sh",
                content=templates.AI_AGENTS_MODULE,
            ),
        ],
    )


def verify_phase(config: BootstrapConfig) -> Phase:
    def tool_check(
        name: str, hint: str, criticality: Criticality = OPTIONAL
    ) -> NoOp:
        return NoOp(
            name=f"check-{name}",
            tool=TOOLS[name],
            criticality=criticality,
            missing=f"{name} not installed",
            hint=hint,
        )

    return Phase(
        name="verify",
        title="Verification",
        steps=[
            tool_check("git", "sudo apt-get install git", REQUIRED),
            tool_check("curl", "sudo apt-get install curl", REQUIRED),
            tool_check("jq", "sudo apt-get install jq"),
            tool_check("rg", "sudo apt-get install ripgrep"),
            tool_check("fd", "sudo apt-get install fd-find"),
            tool_check("fzf", "git clone https://github.com/junegunn/fzf ~/.fzf && ~/.fzf/install"),
            tool_check("bat", "sudo apt-get install bat"),
            tool_check("node", "nvm install --lts"),
            tool_check("npm", "nvm install --lts"),
            tool_check("python", f"pyenv install {config.python_version}"),
            tool_check("rustc", "curl -fsSL https://sh.rustup.rs | sh"),
            tool_check("go", "https://go.dev/doc/install"),
            tool_check("docker", "Enable Docker Desktop WSL integration", REQUIRED),
            NoOp(
                name="check-docker-daemon",
                detector=command_succeeds(["docker", "ps"]),
                missing="Docker daemon not accessible",
                hint="Start Docker Desktop",
            ),
            NoOp(
                name="check-docker-compose",
                detector=any_of(
                    command_succeeds(["docker", "compose", "version"]),
                    tool_present("docker-compose"),
                ),
                missing="Docker Compose not installed",
                hint="sudo apt-get install docker-compose-plugin",
            ),
            tool_check("gh", "sudo apt-get install gh", REQUIRED),
            NoOp(
                name="check-gh-auth",
                detector=command_succeeds(["gh", "auth", "status"]),
                missing="GitHub CLI not authenticated",
                hint="gh auth login",
            ),
            NoOp(
                name="check-git-identity",
                detector=command_succeeds(["git", "config", "--global", "user.email"]),
                missing="Git user email not configured",
                hint=GIT_IDENTITY_HINT,
            ),
            NoOp(
                name="check-ssh-key",
                detector=path_exists(SSH_KEY),
                missing=f"{SSH_KEY} not found",
                hint=f'ssh-keygen -t ed25519 -f {SSH_KEY} -N ""',
            ),
            NoOp(
                name="check-ssh-github",
                detector=output_contains(
                    ["ssh", "-T", "git@github.com", "-o", "BatchMode=yes", "-o", "ConnectTimeout=5"],
                    "successfully authenticated",
                ),
                missing="SSH to GitHub not verified",
                hint="gh ssh-key add ~/.ssh/id_ed25519.pub",
            ),
            tool_check("claude", "npm install -g @anthropic-ai/claude-code"),
            NoOp(
                name="check-copilot",
                detector=output_contains(["gh", "extension", "list"], "copilot"),
                missing="GitHub Copilot CLI not installed",
                hint="gh extension install github/gh-copilot",
            ),
            tool_check("aider", "pip install --user aider-chat"),
            tool_check("ollama", "curl -fsSL https://ollama.com/install.sh | sh"),
            NoOp(
                name="check-bashrc-d",
                detector=path_exists("~/.bashrc.d"),
                missing="~/.bashrc.d missing",
                hint="wsl-bootstrap run --only user-env",
            ),
            NoOp(
                name="check-api-keys",
                detector=path_exists(config.credentials_file),
                missing=f"{config.credentials_file} missing",
                hint="wsl-bootstrap run --only user-env",
            ),
            NoOp(
                name="check-projects-directory",
                detector=path_exists(config.projects_dir),
                missing=f"{config.projects_dir} missing",
                hint=f"mkdir -p {config.projects_dir}",
            ),
        ],
    )
