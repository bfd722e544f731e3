"""File contents written by the user-env and ai-agents phases.

Shell modules land in ``~/.bashrc.d`` and are sourced in lexical order by
the loader block in the rc file.
"""

from __future__ import annotations

import json

import yaml

PATH_MODULE = """\
# PATH configuration, loaded before the other modules

export PATH="$HOME/.local/bin:$HOME/bin:$PATH"

export NVM_DIR="$HOME/.nvm"
[ -s "$NVM_DIR/nvm.sh" ] && . "$NVM_DIR/nvm.sh"
[ -s "$NVM_DIR/bash_completion" ] && . "$NVM_DIR/bash_completion"

export PYENV_ROOT="$HOME/.pyenv"
if [[ -d "$PYENV_ROOT/bin" ]]; then
    export PATH="$PYENV_ROOT/bin:$PATH"
    eval "$(pyenv init -)" 2>/dev/null || true
fi

[[ -f "$HOME/.cargo/env" ]] && . "$HOME/.cargo/env"

if [[ -d /usr/local/go/bin ]]; then
    export PATH="$PATH:/usr/local/go/bin:$HOME/go/bin"
fi

[[ -d "$HOME/.fzf/bin" ]] && export PATH="$PATH:$HOME/.fzf/bin"
[[ -f "$HOME/.fzf.bash" ]] && . "$HOME/.fzf.bash"
"""

ALIASES_MODULE = """\
# Shell aliases

alias ..='cd ..'
alias ...='cd ../..'
alias projects='cd ~/projects'
alias tools='cd ~/tools'

if command -v eza &> /dev/null; then
    alias ls='eza --icons'
    alias ll='eza -la --icons --git'
    alias lt='eza --tree --level=2 --icons'
else
    alias ll='ls -lah'
    alias la='ls -A'
fi

if command -v bat &> /dev/null; then
    alias cat='bat --paging=never'
elif command -v batcat &> /dev/null; then
    alias cat='batcat --paging=never'
fi

alias g='git'
alias gs='git status'
alias ga='git add'
alias gc='git commit'
alias gp='git push'
alias gpl='git pull'
alias gco='git checkout'
alias glog='git log --oneline --graph --decorate'

alias d='docker'
alias dc='docker compose'
alias dps='docker ps'
"""

AI_AGENTS_MODULE = """\
# AI coding agent shortcuts

alias cc='claude'
alias copilot='gh copilot'
alias suggest='gh copilot suggest'
alias explain='gh copilot explain'
alias ai='aider'
alias aider-sonnet='aider --model claude-sonnet-4-20250514'

chat() {
    ollama run "${1:-llama3}"
}

ai-help() {
    echo "claude / cc       Claude Code"
    echo "gh copilot        GitHub Copilot CLI (suggest, explain)"
    echo "aider / ai        Aider"
    echo "chat [model]      Local model through Ollama"
    echo ""
    echo "API keys: ~/.config/ai-agents/env"
}
"""

CREDENTIALS_PLACEHOLDER = """\
# AI agent API keys, sourced by ~/.bashrc
# Uncomment and fill in the keys you use.

# export ANTHROPIC_API_KEY="your-key-here"
# export OPENAI_API_KEY="your-key-here"
# export GEMINI_API_KEY="your-key-here"
# export GROQ_API_KEY="your-key-here"
"""

CLAUDE_CONFIG = json.dumps({"theme": "dark", "model": "claude-sonnet-4-20250514"}, indent=2) + "\n"

AIDER_CONFIG = yaml.safe_dump(
    {
        "model": "claude-sonnet-4-20250514",
        "auto-commits": False,
        "dark-mode": True,
        "pretty": True,
    },
    sort_keys=False,
)

CONTINUE_CONFIG = (
    json.dumps(
        {
            "models": [
                {
                    "title": "Claude Sonnet",
                    "provider": "anthropic",
                    "model": "claude-sonnet-4-20250514",
                    "apiKey": "",
                }
            ],
            "tabAutocompleteModel": {
                "title": "Starcoder",
                "provider": "ollama",
                "model": "starcoder2:3b",
            },
            "contextProviders": [
                {"name": name}
                for name in ("code", "docs", "diff", "terminal", "problems", "folder", "codebase")
            ],
        },
        indent=2,
    )
    + "\n"
)
