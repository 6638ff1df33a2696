"""Shared constants for composeloom.

This module contains the Options-API key vocabulary and the Composition-API
names that the collector and transformer agree on.
"""

# =============================================================================
# Component option keys
# =============================================================================

STATE_KEY = "data"
INPUTS_KEY = "props"
COMPUTED_KEY = "computed"
METHODS_KEY = "methods"
WATCH_KEY = "watch"
INJECT_KEY = "inject"
PROVIDE_KEY = "provide"
MIXINS_KEY = "mixins"
NAME_KEY = "name"

# Expanded watcher options passed straight through to watch()
WATCH_OPTION_KEYS = ("deep", "immediate", "flush", "once")

# =============================================================================
# Lifecycle hooks
# =============================================================================

# Hooks that fire before the instance is constructed; emitted as IIFEs
CREATION_HOOKS = ("beforeCreate", "created")

# Options-API hook -> Composition-API registration function
LIFECYCLE_MAP = {
    "beforeMount": "onBeforeMount",
    "mounted": "onMounted",
    "beforeUpdate": "onBeforeUpdate",
    "updated": "onUpdated",
    "beforeDestroy": "onBeforeUnmount",
    "beforeUnmount": "onBeforeUnmount",
    "destroyed": "onUnmounted",
    "unmounted": "onUnmounted",
    "activated": "onActivated",
    "deactivated": "onDeactivated",
    "errorCaptured": "onErrorCaptured",
    "renderTracked": "onRenderTracked",
    "renderTriggered": "onRenderTriggered",
    "serverPrefetch": "onServerPrefetch",
}

LIFECYCLE_HOOKS = frozenset(CREATION_HOOKS) | frozenset(LIFECYCLE_MAP)

# =============================================================================
# Target idiom
# =============================================================================

VUE_MODULE = "vue"

# Binding that holds every input inside the generated code
PROPS_BINDING = "props"
# Parameter of the exported composable that receives the inputs
PROPS_PARAMETER = "__props"

# Dereference suffix for reactive containers
DEREF_SUFFIX = ".value"
# Dereference helper used outside a binding's own scope
DEREF_HELPER = "unref"
# Deferred-callback primitive
NEXT_TICK = "nextTick"

# Instance helpers with a direct reflective replacement
REFLECTIVE_CALLS = {
    "$set": "Reflect.set",
    "$delete": "Reflect.deleteProperty",
}
DEFERRED_CALLS = frozenset({"$nextTick"})

# =============================================================================
# Advisory comments
# =============================================================================

DEFAULT_ADVISORY_TAG = "composeloom"

UNRESOLVED_TEMPLATE = '/* {tag}: unresolved reference "{name}" */'
BARE_SELF_TEMPLATE = "/* {tag}: unresolved reference to the component instance */"
COMPOSED_TEMPLATE = "/* {tag}: list the members used from {name}() */"
AMBIENT_TEMPLATE = (
    "// {tag}: \"{name}.value\" assumes the injected value is a ref; "
    "drop \".value\" if it is not"
)
WATCH_TARGET_TEMPLATE = '/* {tag}: unresolved watch source "{name}" */'
