from typing import Annotated

from fastapi import Depends, Request

from learnsphere.infrastructure.container import LearnSphereContainer


def get_container(request: Request) -> LearnSphereContainer:
    """
    Pulls the container from the app state (initialized in lifespan),
    falling back to the process-wide instance.
    """
    container = getattr(request.app.state, "container", None)
    return container or LearnSphereContainer.get_instance()


def get_session_service(container: Annotated[LearnSphereContainer, Depends(get_container)]):
    return container.session_service


def get_text_validator(container: Annotated[LearnSphereContainer, Depends(get_container)]):
    return container.text_validator


def get_capability_registry(container: Annotated[LearnSphereContainer, Depends(get_container)]):
    return container.capability_registry
