"""
C# source templates injected into staged Unity projects.

Templates use string.Template placeholders ($name) since C# braces would
clash with str.format. Values substituted into them must already be
escaped C# string literal contents.
"""

from string import Template

GAME_MANAGER = Template("""using UnityEngine;
using UnityEngine.UI;
using System.Collections;
using System.Collections.Generic;

public class GameManager : MonoBehaviour
{
    public static GameManager Instance { get; private set; }

    [Header("Game Information")]
    public string gameName = "$game_name";
    public string gameDescription = "$game_description";
    public string gameGenre = "$game_genre";

    [Header("UI References")]
    public Text gameNameText;
    public Text gameDescriptionText;

    private void Awake()
    {
        if (Instance == null)
        {
            Instance = this;
            DontDestroyOnLoad(gameObject);
        }
        else
        {
            Destroy(gameObject);
        }
    }

    private void Start()
    {
        Debug.Log("Game initialized: " + gameName);
        InitializeUI();
$category_init
    }

    private void InitializeUI()
    {
        if (gameNameText != null)
        {
            gameNameText.text = gameName;
        }

        if (gameDescriptionText != null)
        {
            gameDescriptionText.text = gameDescription;
        }
    }
}
""")

CATEGORY_INIT = {
    "fps": '        // FPS specific initialization\n        Debug.Log("Initializing FPS game elements");',
    "adventure": '        // Adventure specific initialization\n        Debug.Log("Initializing adventure game elements");',
    "puzzle": '        // Puzzle specific initialization\n        Debug.Log("Initializing puzzle game elements");',
    "racing": '        // Racing specific initialization\n        Debug.Log("Initializing racing game elements");',
    "platformer": '        // Platformer specific initialization\n        Debug.Log("Initializing platformer game elements");',
}

DEFAULT_CATEGORY_INIT = '        // Generic game initialization\n        Debug.Log("Initializing game elements");'

UI_MANAGER = """using UnityEngine;
using UnityEngine.UI;
using System.Collections;

public class UIManager : MonoBehaviour
{
    [Header("UI Panels")]
    public GameObject mainMenuPanel;
    public GameObject gamePanel;
    public GameObject pausePanel;

    [Header("UI Elements")]
    public Text gameTitleText;
    public Button startButton;
    public Button resumeButton;
    public Button quitButton;

    private void Start()
    {
        if (gameTitleText != null && GameManager.Instance != null)
        {
            gameTitleText.text = GameManager.Instance.gameName;
        }

        if (startButton != null) startButton.onClick.AddListener(StartGame);
        if (resumeButton != null) resumeButton.onClick.AddListener(ResumeGame);
        if (quitButton != null) quitButton.onClick.AddListener(QuitGame);

        ShowMainMenu();
    }

    public void ShowMainMenu()
    {
        if (mainMenuPanel != null) mainMenuPanel.SetActive(true);
        if (gamePanel != null) gamePanel.SetActive(false);
        if (pausePanel != null) pausePanel.SetActive(false);
    }

    public void StartGame()
    {
        if (mainMenuPanel != null) mainMenuPanel.SetActive(false);
        if (gamePanel != null) gamePanel.SetActive(true);
        if (pausePanel != null) pausePanel.SetActive(false);
    }

    public void PauseGame()
    {
        if (pausePanel != null) pausePanel.SetActive(true);
    }

    public void ResumeGame()
    {
        if (pausePanel != null) pausePanel.SetActive(false);
    }

    public void QuitGame()
    {
        #if UNITY_EDITOR
        UnityEditor.EditorApplication.isPlaying = false;
        #else
        Application.Quit();
        #endif
    }
}
"""

PLAYER_CONTROLLER = """using UnityEngine;
using System.Collections;

public class PlayerController : MonoBehaviour
{
    [Header("Player Settings")]
    public float moveSpeed = 5f;
    public float lookSensitivity = 3f;

    [Header("Gun Settings")]
    public Transform gunPosition;
    public GameObject gunPrefab;
    public float fireRate = 0.25f;
    public int damage = 10;

    private Camera playerCamera;
    private CharacterController characterController;
    private float verticalLookRotation;
    private bool canShoot = true;

    private void Start()
    {
        playerCamera = GetComponentInChildren<Camera>();
        characterController = GetComponent<CharacterController>();

        Cursor.lockState = CursorLockMode.Locked;
        Cursor.visible = false;

        if (gunPrefab != null && gunPosition != null)
        {
            Instantiate(gunPrefab, gunPosition.position, gunPosition.rotation, gunPosition);
        }
    }

    private void Update()
    {
        float x = Input.GetAxis("Horizontal") * moveSpeed;
        float z = Input.GetAxis("Vertical") * moveSpeed;
        Vector3 move = transform.right * x + transform.forward * z;
        characterController.Move(move * Time.deltaTime);

        float mouseX = Input.GetAxis("Mouse X") * lookSensitivity;
        float mouseY = Input.GetAxis("Mouse Y") * lookSensitivity;
        transform.Rotate(Vector3.up * mouseX);
        verticalLookRotation = Mathf.Clamp(verticalLookRotation - mouseY, -90f, 90f);
        playerCamera.transform.localRotation = Quaternion.Euler(verticalLookRotation, 0f, 0f);

        if (Input.GetMouseButton(0) && canShoot)
        {
            StartCoroutine(Shoot());
        }
    }

    private IEnumerator Shoot()
    {
        canShoot = false;

        RaycastHit hit;
        if (Physics.Raycast(playerCamera.transform.position, playerCamera.transform.forward, out hit))
        {
            EnemyController enemy = hit.transform.GetComponent<EnemyController>();
            if (enemy != null)
            {
                enemy.TakeDamage(damage);
            }
        }

        yield return new WaitForSeconds(fireRate);
        canShoot = true;
    }
}
"""

ENEMY_CONTROLLER = """using UnityEngine;
using UnityEngine.AI;
using System.Collections;

public class EnemyController : MonoBehaviour
{
    [Header("Enemy Settings")]
    public int health = 100;
    public float moveSpeed = 3f;
    public float attackRange = 2f;
    public int attackDamage = 10;
    public float attackRate = 1f;

    private Transform player;
    private NavMeshAgent agent;
    private Animator animator;
    private bool isDead = false;
    private bool canAttack = true;

    private void Start()
    {
        GameObject playerObject = GameObject.FindGameObjectWithTag("Player");
        player = playerObject != null ? playerObject.transform : null;
        agent = GetComponent<NavMeshAgent>();
        animator = GetComponent<Animator>();

        if (agent != null)
        {
            agent.speed = moveSpeed;
        }
    }

    private void Update()
    {
        if (isDead || player == null)
            return;

        float distanceToPlayer = Vector3.Distance(transform.position, player.position);
        if (agent != null && distanceToPlayer > attackRange)
        {
            agent.SetDestination(player.position);
            if (animator != null) animator.SetBool("isWalking", true);
        }
        else if (distanceToPlayer <= attackRange && canAttack)
        {
            if (animator != null) animator.SetBool("isAttacking", true);
            StartCoroutine(AttackPlayer());
        }
    }

    private IEnumerator AttackPlayer()
    {
        canAttack = false;

        PlayerHealth playerHealth = player.GetComponent<PlayerHealth>();
        if (playerHealth != null)
        {
            playerHealth.TakeDamage(attackDamage);
        }

        yield return new WaitForSeconds(attackRate);
        canAttack = true;
    }

    public void TakeDamage(int damage)
    {
        if (isDead)
            return;

        health -= damage;
        if (health <= 0)
        {
            Die();
        }
    }

    private void Die()
    {
        isDead = true;
        if (agent != null) agent.isStopped = true;
        if (animator != null) animator.SetTrigger("Die");
        Destroy(gameObject, 3f);
    }
}
"""

PLAYER_HEALTH = """using UnityEngine;
using UnityEngine.UI;
using UnityEngine.SceneManagement;

public class PlayerHealth : MonoBehaviour
{
    public int maxHealth = 100;
    public Slider healthBar;
    public GameObject gameOverPanel;

    private int currentHealth;

    private void Start()
    {
        currentHealth = maxHealth;
        UpdateHealthUI();
        if (gameOverPanel != null) gameOverPanel.SetActive(false);
    }

    public void TakeDamage(int damage)
    {
        currentHealth = Mathf.Max(0, currentHealth - damage);
        UpdateHealthUI();

        if (currentHealth == 0)
        {
            GameOver();
        }
    }

    public void Heal(int amount)
    {
        currentHealth = Mathf.Min(maxHealth, currentHealth + amount);
        UpdateHealthUI();
    }

    private void UpdateHealthUI()
    {
        if (healthBar != null)
        {
            healthBar.value = (float)currentHealth / maxHealth;
        }
    }

    private void GameOver()
    {
        if (gameOverPanel != null) gameOverPanel.SetActive(true);
        Cursor.lockState = CursorLockMode.None;
        Cursor.visible = true;
        Time.timeScale = 0f;
    }

    public void RestartGame()
    {
        Time.timeScale = 1f;
        SceneManager.LoadScene(SceneManager.GetActiveScene().buildIndex);
    }
}
"""

THIRD_PERSON_CONTROLLER = """using UnityEngine;

public class ThirdPersonController : MonoBehaviour
{
    [Header("Movement Settings")]
    public float moveSpeed = 5f;
    public float rotationSpeed = 10f;
    public float jumpHeight = 2f;
    public float gravity = -9.81f;

    [Header("Camera")]
    public Transform cameraTransform;

    private CharacterController controller;
    private Animator animator;
    private Vector3 velocity;

    private void Start()
    {
        controller = GetComponent<CharacterController>();
        animator = GetComponent<Animator>();
        if (cameraTransform == null && Camera.main != null)
        {
            cameraTransform = Camera.main.transform;
        }
    }

    private void Update()
    {
        Vector3 input = new Vector3(Input.GetAxis("Horizontal"), 0f, Input.GetAxis("Vertical"));
        Vector3 direction = input.normalized;

        if (direction.magnitude >= 0.1f)
        {
            float targetAngle = Mathf.Atan2(direction.x, direction.z) * Mathf.Rad2Deg + cameraTransform.eulerAngles.y;
            Quaternion targetRotation = Quaternion.Euler(0f, targetAngle, 0f);
            transform.rotation = Quaternion.Slerp(transform.rotation, targetRotation, rotationSpeed * Time.deltaTime);

            Vector3 moveDirection = targetRotation * Vector3.forward;
            controller.Move(moveDirection * moveSpeed * Time.deltaTime);
        }

        if (animator != null)
        {
            animator.SetFloat("Speed", direction.magnitude);
        }

        if (controller.isGrounded && velocity.y < 0)
        {
            velocity.y = -2f;
        }

        if (Input.GetButtonDown("Jump") && controller.isGrounded)
        {
            velocity.y = Mathf.Sqrt(jumpHeight * -2f * gravity);
        }

        velocity.y += gravity * Time.deltaTime;
        controller.Move(velocity * Time.deltaTime);
    }
}
"""

INTERACTION_SYSTEM = """using UnityEngine;
using UnityEngine.UI;

public interface IInteractable
{
    string GetInteractionPrompt();
    void Interact(GameObject interactor);
}

public class InteractionSystem : MonoBehaviour
{
    public float interactionRange = 2f;
    public KeyCode interactionKey = KeyCode.E;
    public LayerMask interactableLayer;
    public Text promptText;

    private IInteractable currentInteractable;

    private void Update()
    {
        FindInteractable();

        if (currentInteractable != null && Input.GetKeyDown(interactionKey))
        {
            currentInteractable.Interact(gameObject);
        }
    }

    private void FindInteractable()
    {
        currentInteractable = null;

        Collider[] hits = Physics.OverlapSphere(transform.position, interactionRange, interactableLayer);
        foreach (Collider hit in hits)
        {
            IInteractable interactable = hit.GetComponent<IInteractable>();
            if (interactable != null)
            {
                currentInteractable = interactable;
                break;
            }
        }

        if (promptText != null)
        {
            promptText.text = currentInteractable != null ? currentInteractable.GetInteractionPrompt() : "";
        }
    }
}
"""

INVENTORY_SYSTEM = """using UnityEngine;
using System.Collections.Generic;

public class InventorySystem : MonoBehaviour
{
    [System.Serializable]
    public class InventoryItem
    {
        public string itemId;
        public string itemName;
        public int quantity;
    }

    public int capacity = 20;
    public KeyCode toggleKey = KeyCode.I;
    public GameObject inventoryPanel;

    private readonly List<InventoryItem> items = new List<InventoryItem>();

    private void Update()
    {
        if (inventoryPanel != null && Input.GetKeyDown(toggleKey))
        {
            inventoryPanel.SetActive(!inventoryPanel.activeSelf);
        }
    }

    public bool AddItem(string itemId, string itemName, int quantity = 1)
    {
        InventoryItem existing = items.Find(i => i.itemId == itemId);
        if (existing != null)
        {
            existing.quantity += quantity;
            return true;
        }

        if (items.Count >= capacity)
        {
            Debug.Log("Inventory full");
            return false;
        }

        items.Add(new InventoryItem { itemId = itemId, itemName = itemName, quantity = quantity });
        return true;
    }

    public bool RemoveItem(string itemId, int quantity = 1)
    {
        InventoryItem existing = items.Find(i => i.itemId == itemId);
        if (existing == null || existing.quantity < quantity)
            return false;

        existing.quantity -= quantity;
        if (existing.quantity == 0)
        {
            items.Remove(existing);
        }
        return true;
    }

    public bool HasItem(string itemId)
    {
        return items.Exists(i => i.itemId == itemId);
    }
}
"""

PUZZLE_MANAGER = Template("""using UnityEngine;
using UnityEngine.UI;
using System.Collections.Generic;

public class PuzzleManager : MonoBehaviour
{
    [System.Serializable]
    public class PuzzleData
    {
        public string puzzleId;
        public string puzzleName;
        public bool isSolved = false;
    }

    [Header("Puzzle Settings")]
    public string[] levelNames = new string[] { $level_names };
    public List<PuzzleData> puzzles = new List<PuzzleData>();
    public int currentLevelIndex = 0;

    [Header("UI")]
    public Text levelNameText;
    public Text puzzleProgressText;

    private int solvedPuzzles = 0;

    private void Start()
    {
        UpdatePuzzleUI();
    }

    public void SolvePuzzle(string puzzleId)
    {
        PuzzleData puzzle = puzzles.Find(p => p.puzzleId == puzzleId);
        if (puzzle == null || puzzle.isSolved)
            return;

        puzzle.isSolved = true;
        solvedPuzzles++;
        Debug.Log("Puzzle solved: " + puzzle.puzzleName);

        if (solvedPuzzles >= puzzles.Count)
        {
            AdvanceLevel();
        }
        UpdatePuzzleUI();
    }

    private void AdvanceLevel()
    {
        if (currentLevelIndex + 1 < levelNames.Length)
        {
            currentLevelIndex++;
            solvedPuzzles = 0;
            foreach (PuzzleData p in puzzles) p.isSolved = false;
        }
        else
        {
            Debug.Log("All levels completed!");
        }
    }

    private void UpdatePuzzleUI()
    {
        if (levelNameText != null && levelNames.Length > 0)
        {
            levelNameText.text = levelNames[currentLevelIndex];
        }

        if (puzzleProgressText != null)
        {
            puzzleProgressText.text = solvedPuzzles + " / " + puzzles.Count;
        }
    }
}
""")

INTERACTABLE_PUZZLE = """using UnityEngine;
using UnityEngine.Events;

public class InteractablePuzzle : MonoBehaviour
{
    public string puzzleId;
    public string solutionKey;
    public UnityEvent onSolved;

    private bool solved = false;

    public void TrySolve(string attempt)
    {
        if (solved)
            return;

        if (attempt == solutionKey)
        {
            solved = true;
            onSolved.Invoke();

            PuzzleManager manager = FindObjectOfType<PuzzleManager>();
            if (manager != null)
            {
                manager.SolvePuzzle(puzzleId);
            }
        }
    }

    private void OnMouseDown()
    {
        TrySolve(solutionKey);
    }
}
"""

VEHICLE_CONTROLLER = """using UnityEngine;

public class VehicleController : MonoBehaviour
{
    [Header("Vehicle Settings")]
    public float motorForce = 1500f;
    public float brakeForce = 3000f;
    public float maxSteerAngle = 30f;

    [Header("Wheel Colliders")]
    public WheelCollider frontLeftWheel;
    public WheelCollider frontRightWheel;
    public WheelCollider rearLeftWheel;
    public WheelCollider rearRightWheel;

    private float horizontalInput;
    private float verticalInput;
    private bool isBraking;

    private void FixedUpdate()
    {
        horizontalInput = Input.GetAxis("Horizontal");
        verticalInput = Input.GetAxis("Vertical");
        isBraking = Input.GetKey(KeyCode.Space);

        HandleMotor();
        HandleSteering();
    }

    private void HandleMotor()
    {
        rearLeftWheel.motorTorque = verticalInput * motorForce;
        rearRightWheel.motorTorque = verticalInput * motorForce;

        float currentBrakeForce = isBraking ? brakeForce : 0f;
        frontLeftWheel.brakeTorque = currentBrakeForce;
        frontRightWheel.brakeTorque = currentBrakeForce;
        rearLeftWheel.brakeTorque = currentBrakeForce;
        rearRightWheel.brakeTorque = currentBrakeForce;
    }

    private void HandleSteering()
    {
        float steerAngle = maxSteerAngle * horizontalInput;
        frontLeftWheel.steerAngle = steerAngle;
        frontRightWheel.steerAngle = steerAngle;
    }
}
"""

RACE_MANAGER = Template("""using UnityEngine;
using UnityEngine.UI;
using System.Collections;
using System.Collections.Generic;

public class RaceManager : MonoBehaviour
{
    [Header("Race Settings")]
    public string[] trackNames = new string[] { $level_names };
    public int currentTrackIndex = 0;
    public int totalLaps = 3;
    public float countdownTime = 3f;
    public List<Transform> checkpoints = new List<Transform>();

    [Header("UI")]
    public Text trackText;
    public Text lapText;
    public Text timeText;
    public Text countdownText;

    private int currentLap = 0;
    private int currentCheckpoint = 0;
    private float raceTime = 0f;
    private bool isRacing = false;

    private void Start()
    {
        if (trackText != null && trackNames.Length > 0)
        {
            trackText.text = trackNames[currentTrackIndex];
        }
        StartCoroutine(StartRace());
    }

    private void Update()
    {
        if (!isRacing)
            return;

        raceTime += Time.deltaTime;
        if (timeText != null)
        {
            timeText.text = raceTime.ToString("F2");
        }
    }

    private IEnumerator StartRace()
    {
        float remaining = countdownTime;
        while (remaining > 0)
        {
            if (countdownText != null) countdownText.text = Mathf.CeilToInt(remaining).ToString();
            yield return new WaitForSeconds(1f);
            remaining -= 1f;
        }

        if (countdownText != null) countdownText.text = "GO!";
        isRacing = true;
        currentLap = 1;
        UpdateLapUI();
    }

    public void PassCheckpoint(int checkpointIndex)
    {
        if (!isRacing || checkpointIndex != currentCheckpoint)
            return;

        currentCheckpoint++;
        if (currentCheckpoint >= checkpoints.Count)
        {
            currentCheckpoint = 0;
            currentLap++;
            if (currentLap > totalLaps)
            {
                FinishRace();
                return;
            }
            UpdateLapUI();
        }
    }

    private void FinishRace()
    {
        isRacing = false;
        Debug.Log("Race finished in " + raceTime.ToString("F2") + " seconds");
    }

    private void UpdateLapUI()
    {
        if (lapText != null)
        {
            lapText.text = "Lap " + currentLap + " / " + totalLaps;
        }
    }
}
""")

PLATFORMER_CONTROLLER = Template("""using UnityEngine;

public class PlatformerController : MonoBehaviour
{
    [Header("Movement Settings")]
    public float moveSpeed = 5f;
    public float jumpForce = 12f;
    public float doubleJumpForce = 8f;
    public float groundCheckDistance = 0.2f;
    public LayerMask groundLayer;

    [Header("Levels")]
    public string[] levelNames = new string[] { $level_names };
    public int currentLevelIndex = 0;

    private Rigidbody2D rb;
    private Animator animator;
    private bool isGrounded;
    private bool canDoubleJump;
    private bool isFacingRight = true;

    private void Start()
    {
        rb = GetComponent<Rigidbody2D>();
        animator = GetComponent<Animator>();
        if (levelNames.Length > 0)
        {
            Debug.Log("Starting level: " + levelNames[currentLevelIndex]);
        }
    }

    private void Update()
    {
        isGrounded = Physics2D.Raycast(transform.position, Vector2.down, groundCheckDistance, groundLayer);
        if (isGrounded) canDoubleJump = true;

        float moveInput = Input.GetAxisRaw("Horizontal");
        rb.velocity = new Vector2(moveInput * moveSpeed, rb.velocity.y);

        if ((moveInput > 0 && !isFacingRight) || (moveInput < 0 && isFacingRight))
        {
            Flip();
        }

        if (Input.GetButtonDown("Jump"))
        {
            if (isGrounded)
            {
                rb.velocity = new Vector2(rb.velocity.x, jumpForce);
            }
            else if (canDoubleJump)
            {
                rb.velocity = new Vector2(rb.velocity.x, doubleJumpForce);
                canDoubleJump = false;
            }
        }

        if (animator != null)
        {
            animator.SetFloat("Speed", Mathf.Abs(moveInput));
            animator.SetBool("IsGrounded", isGrounded);
        }
    }

    private void Flip()
    {
        isFacingRight = !isFacingRight;
        Vector3 scale = transform.localScale;
        scale.x *= -1;
        transform.localScale = scale;
    }

    public void CompleteLevel()
    {
        if (currentLevelIndex + 1 < levelNames.Length)
        {
            currentLevelIndex++;
            Debug.Log("Next level: " + levelNames[currentLevelIndex]);
        }
        else
        {
            Debug.Log("All levels completed!");
        }
    }
}
""")

ENEMY = """using UnityEngine;

public class Enemy : MonoBehaviour
{
    public int health = 30;
    public float patrolSpeed = 2f;
    public float patrolDistance = 3f;
    public int contactDamage = 10;

    private Vector3 startPosition;
    private int direction = 1;

    private void Start()
    {
        startPosition = transform.position;
    }

    private void Update()
    {
        transform.Translate(Vector2.right * direction * patrolSpeed * Time.deltaTime);
        if (Mathf.Abs(transform.position.x - startPosition.x) >= patrolDistance)
        {
            direction *= -1;
        }
    }

    public void TakeDamage(int damage)
    {
        health -= damage;
        if (health <= 0)
        {
            Destroy(gameObject);
        }
    }

    private void OnCollisionEnter2D(Collision2D collision)
    {
        if (collision.gameObject.CompareTag("Player"))
        {
            collision.gameObject.SendMessage("TakeDamage", contactDamage, SendMessageOptions.DontRequireReceiver);
        }
    }
}
"""

COLLECTIBLE = """using UnityEngine;

public class Collectible : MonoBehaviour
{
    public int value = 1;
    public float rotationSpeed = 90f;
    public AudioClip collectSound;

    private static int totalCollected = 0;

    private void Update()
    {
        transform.Rotate(Vector3.up * rotationSpeed * Time.deltaTime);
    }

    private void OnTriggerEnter2D(Collider2D other)
    {
        if (!other.CompareTag("Player"))
            return;

        totalCollected += value;
        if (collectSound != null)
        {
            AudioSource.PlayClipAtPoint(collectSound, transform.position);
        }
        Debug.Log("Collected: " + totalCollected);
        Destroy(gameObject);
    }
}
"""

GENERIC_CONTROLLER = """using UnityEngine;

public class GenericController : MonoBehaviour
{
    [Header("Movement Settings")]
    public float moveSpeed = 5f;
    public float jumpForce = 5f;

    private Rigidbody rb;
    private Animator animator;

    private void Start()
    {
        rb = GetComponent<Rigidbody>();
        animator = GetComponent<Animator>();
    }

    private void Update()
    {
        float horizontal = Input.GetAxis("Horizontal");
        float vertical = Input.GetAxis("Vertical");

        Vector3 movement = new Vector3(horizontal, 0f, vertical).normalized * moveSpeed * Time.deltaTime;
        transform.Translate(movement);

        if (animator != null)
        {
            animator.SetBool("IsMoving", movement.magnitude > 0);
        }

        if (Input.GetButtonDown("Jump") && rb != null)
        {
            rb.AddForce(Vector3.up * jumpForce, ForceMode.Impulse);
        }
    }
}
"""

EDITOR_BUILD_SCRIPT = """using UnityEngine;
using UnityEditor;
using System.IO;
using System.Linq;

public class BuildScript
{
    public static void BuildWebGL()
    {
        string buildDir = "";
        string[] args = System.Environment.GetCommandLineArgs();
        for (int i = 0; i < args.Length; i++)
        {
            if (args[i] == "-buildDir" && i + 1 < args.Length)
            {
                buildDir = args[i + 1];
            }
        }

        if (string.IsNullOrEmpty(buildDir))
        {
            Debug.LogError("Build directory not specified!");
            EditorApplication.Exit(1);
            return;
        }

        if (!Directory.Exists(buildDir))
        {
            Directory.CreateDirectory(buildDir);
        }

        BuildPlayerOptions buildPlayerOptions = new BuildPlayerOptions
        {
            scenes = EditorBuildSettings.scenes.Length > 0
                ? EditorBuildSettings.scenes.Select(s => s.path).ToArray()
                : new string[] { "Assets/Scenes/MainScene.unity" },
            targetGroup = BuildTargetGroup.WebGL,
            target = BuildTarget.WebGL,
            locationPathName = buildDir,
            options = BuildOptions.None
        };

        Debug.Log("Starting WebGL build to: " + buildDir);
        BuildPipeline.BuildPlayer(buildPlayerOptions);
        Debug.Log("WebGL build completed");
    }
}
"""
