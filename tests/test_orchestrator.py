import asyncio
import logging

import pytest
from sqlalchemy.exc import OperationalError

from shortforge.models import Character, JobCharacter, JobStatus, Scene
from shortforge.pipeline.base import JobConflictError, NonRetryableError, PresetValidationError, StageError
from shortforge.pipeline.orchestrator import PipelineOrchestrator, build_roster, media_progress
from shortforge.schemas.generation import ImageResult

from fakes import FakeImageService, FakeTextService, prompts_response, script_response


def _orchestrator(db, model_cache, text, images=None, batch_size=3):
    return PipelineOrchestrator(db, text, images or FakeImageService(), model_cache, batch_size=batch_size)


def test_full_run_completes(db, model_cache, make_job):
    job = make_job()
    text = FakeTextService([script_response(3), prompts_response([0, 1, 2])])
    images = FakeImageService()

    job = asyncio.run(_orchestrator(db, model_cache, text, images).run(job.id, "full"))

    assert job.status == JobStatus.COMPLETED
    assert job.progress == 100
    assert job.completed_at is not None
    assert job.error_message is None
    assert job.credits_used == 3
    assert job.title == "Deep Sea"
    assert job.script["title"] == "Deep Sea"
    assert [scene.order for scene in job.scenes] == [0, 1, 2]
    assert all(scene.is_generated and scene.media_url for scene in job.scenes)
    assert all(scene.error_message is None for scene in job.scenes)
    assert len(images.calls) == 3
    assert images.calls[0].image_size == "portrait_16_9"


def test_scriptwriter_receives_payload(db, model_cache, make_job):
    job = make_job()
    text = FakeTextService([script_response(3), prompts_response([0, 1, 2])])

    asyncio.run(_orchestrator(db, model_cache, text).run(job.id, "full"))

    script_call = text.calls[0]
    assert '"premise": "The deep sea is stranger than space"' in script_call["prompt"]
    assert '"maxScenes": 4' in script_call["prompt"]
    assert str(script_call["model"]) == "groq:llama-3.3-70b-versatile"


def test_partial_media_failure(db, model_cache, make_job):
    job = make_job()
    text = FakeTextService([script_response(3), prompts_response([0, 1, 2], fail_orders={1})])

    job = asyncio.run(_orchestrator(db, model_cache, text).run(job.id, "full"))

    assert job.status == JobStatus.FAILED
    assert job.error_message == "1 scene(s) failed"
    assert job.completed_at is None
    assert job.credits_used == 2
    assert job.progress == 95
    failed = [scene for scene in job.scenes if not scene.is_generated]
    assert [scene.order for scene in failed] == [1]
    assert "content policy" in failed[0].error_message
    assert failed[0].media_url is None


def test_media_rerun_only_retries_failed_scenes(db, model_cache, make_job):
    job = make_job()
    text = FakeTextService([script_response(3), prompts_response([0, 1, 2], fail_orders={1})])
    asyncio.run(_orchestrator(db, model_cache, text).run(job.id, "full"))

    scene = db.query(Scene).filter(Scene.job_id == job.id, Scene.order == 1).one()
    scene.image_prompt = "prompt for scene 1, retried"
    db.commit()

    images = FakeImageService()
    job = asyncio.run(_orchestrator(db, model_cache, FakeTextService(), images).run(job.id, "media"))

    assert job.status == JobStatus.COMPLETED
    assert job.credits_used == 3
    assert len(images.calls) == 1


def test_script_failure_marks_job_failed(db, model_cache, make_job):
    job = make_job()
    text = FakeTextService([NonRetryableError("model overloaded")])

    with pytest.raises(StageError) as exc_info:
        asyncio.run(_orchestrator(db, model_cache, text).run(job.id, "full"))

    assert exc_info.value.stage == "script"
    db.refresh(job)
    assert job.status == JobStatus.FAILED
    assert "model overloaded" in job.error_message
    assert job.scenes == []


def test_unparsable_script_is_a_stage_failure(db, model_cache, make_job):
    job = make_job()
    text = FakeTextService(["Sorry, I cannot help with that."])

    with pytest.raises(StageError):
        asyncio.run(_orchestrator(db, model_cache, text).run(job.id, "full"))

    db.refresh(job)
    assert job.status == JobStatus.FAILED
    assert db.query(Scene).filter(Scene.job_id == job.id).count() == 0


def test_failed_scene_insert_leaves_no_scenes(db, model_cache, make_job, monkeypatch):
    job = make_job()
    text = FakeTextService([script_response(3)])
    real_commit = db.commit
    commits = []

    def flaky_commit():
        commits.append(1)
        # First commit admits the run, the second stores the script
        if len(commits) == 2:
            raise OperationalError("INSERT INTO scenes", {}, Exception("disk I/O error"))
        return real_commit()

    monkeypatch.setattr(db, "commit", flaky_commit)

    with pytest.raises(StageError) as exc_info:
        asyncio.run(_orchestrator(db, model_cache, text).run(job.id, "full"))

    assert exc_info.value.stage == "script"
    db.refresh(job)
    assert job.status == JobStatus.FAILED
    assert "disk I/O error" in job.error_message
    assert job.title is None
    assert job.scenes == []
    assert db.query(Scene).filter(Scene.job_id == job.id).count() == 0


def test_error_between_stages_marks_job_failed(db, model_cache, make_job):
    job = make_job()
    text = FakeTextService([script_response(3), prompts_response([0, 1, 2])])
    orchestrator = _orchestrator(db, model_cache, text)

    def broken_transition(job, status, progress):
        raise OperationalError("UPDATE shorts", {}, Exception("database is locked"))

    orchestrator._transition = broken_transition

    with pytest.raises(StageError) as exc_info:
        asyncio.run(orchestrator.run(job.id, "full"))

    assert exc_info.value.stage == "script"
    db.refresh(job)
    assert job.status == JobStatus.FAILED
    assert "database is locked" in job.error_message

    # The job is not left locked in a running status
    text.responses = [prompts_response([0, 1, 2])]
    job = asyncio.run(_orchestrator(db, model_cache, text).run(job.id, "full"))
    assert job.status == JobStatus.COMPLETED


def test_empty_image_result_is_logged(db, model_cache, make_job, caplog):
    class NoImages(FakeImageService):
        async def generate(self, request, model):
            self.calls.append(request)
            return ImageResult(images=[])

    job = make_job()
    text = FakeTextService([script_response(1), prompts_response([0])])

    with caplog.at_level(logging.ERROR, logger="shortforge.pipeline.media_stage"):
        job = asyncio.run(_orchestrator(db, model_cache, text, NoImages()).run(job.id, "full"))

    assert job.status == JobStatus.FAILED
    assert job.scenes[0].error_message == "Image service returned no images"
    assert "[Media] Scene 0 failed: Image service returned no images" in caplog.text


def test_prompt_failure_keeps_scenes(db, model_cache, make_job):
    job = make_job()
    text = FakeTextService([script_response(3), '{"style": "no prompts here"}'])

    with pytest.raises(StageError) as exc_info:
        asyncio.run(_orchestrator(db, model_cache, text).run(job.id, "full"))

    assert exc_info.value.stage == "prompts"
    db.refresh(job)
    assert job.status == JobStatus.FAILED
    assert len(job.scenes) == 3


@pytest.mark.parametrize("status", [JobStatus.SCRIPTING, JobStatus.PROMPTING, JobStatus.GENERATING, JobStatus.COMPLETED])
def test_run_rejected_unless_draft_or_failed(db, model_cache, make_job, status):
    job = make_job(status=status)
    text = FakeTextService([script_response(3), prompts_response([0, 1, 2])])

    with pytest.raises(JobConflictError) as exc_info:
        asyncio.run(_orchestrator(db, model_cache, text).run(job.id, "full"))

    assert exc_info.value.message == f"Job {job.id} cannot start a run from status {status}"
    db.refresh(job)
    assert job.status == status
    assert text.calls == []


def test_failed_job_can_run_again(db, model_cache, make_job):
    job = make_job(status=JobStatus.FAILED, error_message="script stage failed: timeout")
    text = FakeTextService([script_response(3), prompts_response([0, 1, 2])])

    job = asyncio.run(_orchestrator(db, model_cache, text).run(job.id, "full"))

    assert job.status == JobStatus.COMPLETED
    assert job.error_message is None


def test_script_order_follows_model_order_when_complete(db, model_cache, make_job):
    job = make_job()
    response = (
        '{"scenes": ['
        '{"order": 2, "narration": "third", "visualDescription": "c"},'
        '{"order": 0, "narration": "first", "visualDescription": "a"},'
        '{"order": 1, "narration": "second", "visualDescription": "b"}]}'
    )

    job = asyncio.run(_orchestrator(db, model_cache, FakeTextService([response])).run(job.id, "script"))

    assert [(s.order, s.narration) for s in job.scenes] == [(0, "first"), (1, "second"), (2, "third")]
    assert job.hook == "first"
    assert job.cta == "third"
    # Missing durations fall back to the calculated scene duration
    assert all(s.duration == 5 for s in job.scenes)


def test_script_order_falls_back_to_position(db, model_cache, make_job):
    job = make_job()
    response = (
        '{"scenes": ['
        '{"order": 5, "narration": "first"},'
        '{"narration": "second"}]}'
    )

    job = asyncio.run(_orchestrator(db, model_cache, FakeTextService([response])).run(job.id, "script"))

    assert [(s.order, s.narration) for s in job.scenes] == [(0, "first"), (1, "second")]


def test_script_step_returns_job_to_draft(db, model_cache, make_job):
    job = make_job()
    job = asyncio.run(_orchestrator(db, model_cache, FakeTextService([script_response(4)])).run(job.id, "script"))

    assert job.status == JobStatus.DRAFT
    assert job.progress == 30
    assert len(job.scenes) == 4
    assert all(scene.image_prompt is None for scene in job.scenes)


def test_prompts_are_matched_by_scene_order(db, model_cache, make_job):
    job = make_job()
    asyncio.run(_orchestrator(db, model_cache, FakeTextService([script_response(3)])).run(job.id, "script"))

    # Reversed and missing scene 1
    text = FakeTextService([prompts_response([2, 0])])
    job = asyncio.run(_orchestrator(db, model_cache, text).run(job.id, "prompts"))

    prompts = {scene.order: scene.image_prompt for scene in job.scenes}
    assert prompts == {0: "prompt for scene 0", 1: None, 2: "prompt for scene 2"}
    assert job.status == JobStatus.DRAFT
    assert job.progress == 50
    assert text.calls[0]["temperature"] == 0.5


def test_scenes_without_prompt_are_skipped(db, model_cache, make_job):
    job = make_job()
    text = FakeTextService([script_response(3), prompts_response([0, 2])])
    images = FakeImageService()

    job = asyncio.run(_orchestrator(db, model_cache, text, images).run(job.id, "full"))

    assert job.status == JobStatus.COMPLETED
    assert job.credits_used == 2
    assert len(images.calls) == 2
    assert not [s for s in job.scenes if s.order == 1][0].is_generated


def test_full_run_resumes_at_prompts_when_scenes_exist(db, model_cache, make_job):
    job = make_job()
    asyncio.run(_orchestrator(db, model_cache, FakeTextService([script_response(3)])).run(job.id, "script"))

    text = FakeTextService([prompts_response([0, 1, 2])])
    job = asyncio.run(_orchestrator(db, model_cache, text).run(job.id, "full"))

    assert job.status == JobStatus.COMPLETED
    assert len(text.calls) == 1


def test_media_batches_are_bounded(db, model_cache, make_job):
    job = make_job(scene_count_override=7)
    text = FakeTextService([script_response(7), prompts_response(list(range(7)))])
    images = FakeImageService(delay=0.01)

    job = asyncio.run(_orchestrator(db, model_cache, text, images, batch_size=3).run(job.id, "full"))

    assert job.status == JobStatus.COMPLETED
    assert len(images.calls) == 7
    assert images.max_active == 3


def test_script_step_rejected_when_scenes_exist(db, model_cache, make_job):
    job = make_job()
    asyncio.run(_orchestrator(db, model_cache, FakeTextService([script_response(3)])).run(job.id, "script"))

    with pytest.raises(PresetValidationError):
        asyncio.run(_orchestrator(db, model_cache, FakeTextService()).run(job.id, "script"))


@pytest.mark.parametrize("step", ["prompts", "media"])
def test_later_steps_need_scenes(db, model_cache, make_job, step):
    job = make_job()

    with pytest.raises(PresetValidationError):
        asyncio.run(_orchestrator(db, model_cache, FakeTextService()).run(job.id, step))

    db.refresh(job)
    assert job.status == JobStatus.DRAFT


def test_missing_style_is_rejected_without_mutation(db, model_cache, make_job):
    job = make_job(style_id=None)

    with pytest.raises(PresetValidationError):
        asyncio.run(_orchestrator(db, model_cache, FakeTextService()).run(job.id, "full"))

    db.refresh(job)
    assert job.status == JobStatus.DRAFT
    assert job.progress == 0


def test_job_model_override_is_used_for_script(db, model_cache, make_job):
    job = make_job(ai_model="gemini:gemini-2.5-flash")
    text = FakeTextService([script_response(3)])

    asyncio.run(_orchestrator(db, model_cache, text).run(job.id, "script"))

    assert str(text.calls[0]["model"]) == "gemini:gemini-2.5-flash"


def test_roster_uses_cast_overrides(db, make_job):
    job = make_job()
    db.add(Character(id="char_1", user_id="user_1", name="Ana", description="biologist", prompt_description="red hair"))
    db.add(JobCharacter(job_id=job.id, character_id="char_1", order_index=0, role="host", custom_clothing="a wetsuit"))
    db.commit()
    db.refresh(job)

    assert build_roster(job) == [{
        "name": "Ana",
        "description": "biologist",
        "visual_prompt": "red hair, wearing a wetsuit",
        "role": "host",
    }]


def test_media_progress():
    assert media_progress(0, 4) == 55
    assert media_progress(1, 4) == 65
    assert media_progress(3, 7) == 72
    assert media_progress(4, 4) == 95
