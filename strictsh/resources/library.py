LIBRARY_FILENAME = "strict.sh"

BASH_LIBRARY = r"""# strictsh: strict mode helpers for bash.
# Source this file, then call strict::enable.

strict::enable() {
  set -o errexit -o errtrace -o nounset -o pipefail
  shopt -s inherit_errexit 2>/dev/null || :
  IFS=$'\n\t'
  trap 'strict::failure "$?" "${PIPESTATUS[@]}"' ERR
}

strict::disable() {
  set +o errexit +o errtrace +o nounset +o pipefail
  shopt -u inherit_errexit 2>/dev/null || :
  IFS=$' \t\n'
  trap - ERR
}

# strict::failure STATUS [PIPESTATUS...]
strict::failure() {
  local status=${1:-1}
  local command=$BASH_COMMAND
  local IFS=' '
  if (( $# > 0 )); then
    shift
  fi
  local -a pipestatus=("$@")
  set +o xtrace
  printf 'Error: `%s` exited with status %d at %s:%d\n' \
    "$command" "$status" "${BASH_SOURCE[1]:-$0}" "${BASH_LINENO[0]:-0}" >&2
  if (( ${#pipestatus[@]} > 1 )); then
    printf 'Pipeline status: %s\n' "${pipestatus[*]}" >&2
  fi
  strict::stacktrace 1 >&2
}

# strict::stacktrace [SKIP]
# Frame arguments are only available while `shopt -s extdebug` is on.
strict::stacktrace() {
  local -i skip=${1:-0} k j argc offset=0 index=0
  local IFS=' '
  local label arg args
  printf 'Stack trace:\n'
  for (( k = 0; k < ${#FUNCNAME[@]}; k++ )); do
    argc=${BASH_ARGC[k]:-0}
    if (( k > skip )); then
      label=${FUNCNAME[k]}
      if [[ $label == main || $label == source ]]; then
        label=${BASH_SOURCE[k]:-$0}
      fi
      args=''
      for (( j = offset + argc - 1; j >= offset; j-- )); do
        arg=${BASH_ARGV[j]-}
        if (( ${#arg} > 255 )); then
          arg="${arg:0:255}..."
        fi
        printf -v arg '%q' "$arg"
        args+=" $arg"
      done
      printf '  [%d] %s %s:%d%s\n' \
        "$index" "$label" "${BASH_SOURCE[k]:-$0}" "${BASH_LINENO[k-1]:-0}" "$args"
      index+=1
    fi
    offset+=argc
  done
}

# strict::run VAR COMMAND [ARGS...]
# Runs COMMAND in a subshell and stores its status in VAR (empty VAR
# discards it). The caller keeps running whatever the status.
# Called in an if/while test or an &&, || or ! operand, bash keeps errexit
# suppressed inside COMMAND as well, so a failing step does not stop it.
strict::run() {
  local __strict_dest=${1-}
  if (( $# > 0 )); then
    shift
  fi
  local __strict_errexit=+o __strict_trap __strict_status
  if [[ $- == *e* ]]; then
    __strict_errexit=-o
  fi
  __strict_trap=$(trap -p ERR)
  set +o errexit
  trap - ERR
  (
    set "$__strict_errexit" errexit
    if [[ -n $__strict_trap ]]; then
      eval "$__strict_trap"
    fi
    "$@" &
    trap - ERR
    wait "$!"
  )
  __strict_status=$?
  set "$__strict_errexit" errexit
  if [[ -n $__strict_trap ]]; then
    eval "$__strict_trap"
  fi
  if [[ -n $__strict_dest ]]; then
    printf -v "$__strict_dest" '%d' "$__strict_status"
  fi
}

# strict::errexit_honored VAR
# Stores true in VAR when errexit takes effect at the call site, false when
# the surrounding if/while/&&/||/! context suppresses it.
strict::errexit_honored() {
  local __strict_dest=${1-}
  local __strict_errexit=+o __strict_trap __strict_status __strict_verdict=false
  if [[ $- == *e* ]]; then
    __strict_errexit=-o
  fi
  __strict_trap=$(trap -p ERR)
  trap - ERR
  set +o errexit
  ( set -o errexit; false; true )
  __strict_status=$?
  set "$__strict_errexit" errexit
  if [[ -n $__strict_trap ]]; then
    eval "$__strict_trap"
  fi
  if (( __strict_status != 0 )); then
    __strict_verdict=true
  fi
  if [[ -n $__strict_dest ]]; then
    printf -v "$__strict_dest" '%s' "$__strict_verdict"
  fi
}
"""
